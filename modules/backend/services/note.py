"""
Note Service.

Save/load/delete lifecycle of notes. Translates client requests into
persistence operations and gates encrypted notes on their password.

Two secrets come from the one password a user types: the client derives
an AES key from it to encrypt ``content`` before sending, and the server
stores a bcrypt hash of it to decide who may read or delete the note.
The server never needs the encryption key; whether ``content`` is
ciphertext is up to the client.
"""

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.concurrency import run_blocking
from modules.backend.core.exceptions import (
    AuthorizationError,
    ConflictError,
    ValidationError,
)
from modules.backend.core.security import hash_password, verify_password
from modules.backend.core.storage import FileStorage
from modules.backend.core.utils import (
    SLUG_MAX_LENGTH,
    SLUG_MIN_LENGTH,
    clean_slug,
    generate_note_id,
)
from modules.backend.models.file import FileAttachment
from modules.backend.models.note import Note
from modules.backend.repositories.file import FileRepository
from modules.backend.repositories.note import NoteRepository
from modules.backend.services.base import BaseService


@dataclass
class NoteLoadResult:
    """Outcome of a load: either the stored content or the password-required sentinel."""

    note: Note
    content: str
    password_required: bool
    files: list[FileAttachment] = field(default_factory=list)


class NoteService(BaseService):
    """
    Service for note business logic.

    Handles upserts, password-gated loads and deletes, slug changes
    and statistics.
    """

    def __init__(self, session: AsyncSession, storage: FileStorage | None = None) -> None:
        super().__init__(session)
        self.repo = NoteRepository(session)
        self.file_repo = FileRepository(session)
        self.storage = storage

    @staticmethod
    def resolve_note_id(key: str | None, url: str | None) -> str:
        """Explicit key, else the custom url, else a fresh random slug."""
        return key or url or generate_note_id()

    async def save_note(
        self,
        key: str | None,
        content: str = "",
        password: str | None = None,
        url: str | None = None,
        monospace: bool = False,
        caret: int = 0,
    ) -> Note:
        """
        Create or overwrite a note.

        A non-empty password makes the note encrypted and stores its
        bcrypt hash. An absent password saves an unencrypted note and
        clears any previous hash.

        Args:
            key: Requested note slug
            content: Note content (ciphertext for encrypted notes)
            password: Optional note password
            url: Optional custom slug
            monospace: Display preference
            caret: Cursor offset

        Returns:
            The stored note
        """
        note_id = self.resolve_note_id(key, url)
        if caret < 0:
            raise ValidationError("Caret must be non-negative", details={"caret": caret})

        password_hash = await run_blocking(hash_password, password) if password else None

        self._log_operation(
            "Saving note",
            note_id=note_id,
            encrypted=password_hash is not None,
            size=len(content),
        )

        note, created = await self._execute_db_operation(
            "save_note",
            self.repo.upsert(
                note_id,
                content=content,
                password_hash=password_hash,
                is_encrypted=password_hash is not None,
                monospace=monospace,
                caret=caret,
                url=url or None,
            ),
        )

        self._log_debug("Note saved", note_id=note.id, created=created)
        return note

    async def load_note(self, note_id: str, password: str | None = None) -> NoteLoadResult:
        """
        Load a note, gating encrypted notes on their password.

        Returns:
            NoteLoadResult; ``password_required`` is set (and ``content``
            empty) for an encrypted note loaded without a password

        Raises:
            NotFoundError: If the note does not exist
            AuthorizationError: If the password does not match
        """
        note = await self.repo.get_by_id(note_id)

        if note.is_encrypted:
            if not password:
                self._log_debug("Password required", note_id=note_id)
                return NoteLoadResult(note=note, content="", password_required=True)
            await self._verify_note_password(note, password)

        files = await self.file_repo.list_by_note(note.id)
        return NoteLoadResult(
            note=note,
            content=note.content,
            password_required=False,
            files=files,
        )

    async def delete_note(self, note_id: str, password: str | None = None) -> int:
        """
        Delete a note, its attachment rows and their payloads on disk.

        The deletion is committed before payloads are unlinked, so a failed
        commit never leaves rows pointing at missing files. A crash between
        the two leaves orphan payloads on disk instead.

        Encrypted notes require their password; unencrypted notes are
        deleted unconditionally.

        Returns:
            Number of attachments removed

        Raises:
            NotFoundError: If the note does not exist
            AuthorizationError: If the note is encrypted and the password is missing or wrong
        """
        note = await self.repo.get_by_id(note_id)
        if note.is_encrypted:
            await self._verify_note_password(note, password)

        files = await self.file_repo.list_by_note(note.id)
        paths = [f.file_path for f in files]

        self._log_operation("Deleting note", note_id=note_id, files=len(paths))

        await self._execute_db_operation("delete_note", self.repo.delete(note.id))
        await self._execute_db_operation("delete_note", self.session.commit())

        if self.storage is not None:
            for path in paths:
                await run_blocking(self.storage.delete, path)

        return len(paths)

    async def change_url(self, note_id: str, new_url: str, password: str | None = None) -> Note:
        """
        Move a note (and its attachments) to a new slug.

        Raises:
            ValidationError: If the slug is empty, too short/long or unchanged
            NotFoundError: If the note does not exist
            AuthorizationError: If the note is encrypted and the password is missing or wrong
            ConflictError: If another note already uses the slug
        """
        slug = clean_slug(new_url)
        if not slug:
            raise ValidationError("URL can only contain letters, numbers, hyphens, and underscores")
        if not SLUG_MIN_LENGTH <= len(slug) <= SLUG_MAX_LENGTH:
            raise ValidationError(
                f"URL must be between {SLUG_MIN_LENGTH} and {SLUG_MAX_LENGTH} characters long",
                details={"length": len(slug)},
            )

        note = await self.repo.get_by_id(note_id)
        if slug == note.id:
            raise ValidationError("New URL must be different from current URL")
        if note.is_encrypted:
            await self._verify_note_password(note, password)
        if await self.repo.exists(slug):
            raise ConflictError("URL is already taken")

        self._log_operation("Changing note URL", note_id=note_id, new_id=slug)
        return await self._execute_db_operation("change_url", self.repo.move(note, slug))

    async def get_stats(self) -> dict[str, Any]:
        """Count total, encrypted and public notes."""
        return await self.repo.get_stats()

    async def _verify_note_password(self, note: Note, password: str | None) -> None:
        if not password or not await run_blocking(verify_password, password, note.password_hash):
            self._logger.warning("Invalid note password", extra={"note_id": note.id})
            raise AuthorizationError("Invalid password")
