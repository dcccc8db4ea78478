"""
Security Utilities.

Password hashing for note passwords and user accounts, and bearer
token issuing/decoding for the account endpoints.

Note passwords are verified server-side with bcrypt. This hash is
independent of the client-side encryption key, which is derived from
the same user-entered string by modules.client.encryption.
"""

from datetime import timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from modules.backend.core.config import get_app_config, get_settings
from modules.backend.core.exceptions import AuthenticationError
from modules.backend.core.logging import get_logger
from modules.backend.core.utils import utc_now

logger = get_logger(__name__)


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain password
        rounds: bcrypt cost factor. Defaults to security.yaml bcrypt_rounds.
    """
    if rounds is None:
        rounds = get_app_config().security.bcrypt_rounds
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verify a password against its hash. A missing or malformed hash never verifies."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Payload data to encode (``sub`` holds the user id)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    to_encode = data.copy()

    if expires_delta:
        expire = utc_now() + expires_delta
    else:
        expire = utc_now() + timedelta(minutes=jwt_config.access_token_expire_minutes)

    to_encode.update({"exp": expire, "type": "access", "aud": jwt_config.audience})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=jwt_config.algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a JWT token.

    Raises:
        AuthenticationError: If token is invalid, expired or not an access token
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[jwt_config.algorithm],
            audience=jwt_config.audience,
        )
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        raise AuthenticationError("Invalid or expired token")

    if payload.get("type") != "access" or not payload.get("sub"):
        raise AuthenticationError("Invalid or expired token")
    return payload
