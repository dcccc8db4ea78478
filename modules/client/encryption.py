"""
Note Encryption.

Encrypts note content on the client so the server only ever stores
ciphertext for password-protected notes.

Wire format: base64(nonce || ciphertext || tag) with a 12-byte random
nonce and AES-256-GCM. The key is the SHA-256 digest of the UTF-8
password, which matches what a browser gets from WebCrypto with the same
inputs. There is no salt; a salted derivation can be supplied through
``KeyDeriver`` without changing the blob format.
"""

import base64
import binascii
import hashlib
import os
from typing import Protocol

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

NONCE_SIZE = 12
TAG_SIZE = 16


class DecryptionError(Exception):
    """Raised when a blob cannot be decrypted with the given password."""


class KeyDeriver(Protocol):
    def derive(self, password: str) -> bytes:
        """Return a 32-byte AES key for the password."""
        ...


class Sha256KeyDeriver:
    """Unsalted SHA-256 of the password."""

    def derive(self, password: str) -> bytes:
        return hashlib.sha256(password.encode("utf-8")).digest()


DEFAULT_DERIVER: KeyDeriver = Sha256KeyDeriver()


def _require_password(password: str) -> None:
    if not password:
        raise ValueError("Password must not be empty")


def encrypt(plaintext: str, password: str, deriver: KeyDeriver = DEFAULT_DERIVER) -> str:
    """
    Encrypt text with a password.

    Every call uses a fresh nonce, so encrypting the same text twice
    gives different blobs.

    Raises:
        ValueError: If the password is empty
    """
    _require_password(password)
    nonce = os.urandom(NONCE_SIZE)
    sealed = AESGCM(deriver.derive(password)).encrypt(nonce, plaintext.encode("utf-8"), None)
    return base64.b64encode(nonce + sealed).decode("ascii")


def decrypt(blob: str, password: str, deriver: KeyDeriver = DEFAULT_DERIVER) -> str:
    """
    Decrypt a blob produced by ``encrypt``.

    Raises:
        ValueError: If the password is empty
        DecryptionError: On a wrong password, malformed or truncated blob
    """
    _require_password(password)
    try:
        raw = base64.b64decode(blob, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecryptionError("Failed to decrypt text") from e

    if len(raw) < NONCE_SIZE + TAG_SIZE:
        raise DecryptionError("Failed to decrypt text")

    nonce, sealed = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
    try:
        plaintext = AESGCM(deriver.derive(password)).decrypt(nonce, sealed, None)
    except InvalidTag as e:
        raise DecryptionError("Failed to decrypt text") from e

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecryptionError("Failed to decrypt text") from e
