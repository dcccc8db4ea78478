"""
File Service.

Attachment upload, listing, download and deletion.

Upload policy: the whole batch is validated before anything touches the
disk or the database. One disallowed type or oversized file rejects the
batch, leaving no metadata rows and no payloads behind.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.concurrency import run_blocking
from modules.backend.core.config_schema import StorageSchema
from modules.backend.core.exceptions import (
    NotFoundError,
    PayloadTooLargeError,
    UnsupportedMediaError,
    ValidationError,
)
from modules.backend.core.storage import FileStorage
from modules.backend.models.file import FileAttachment
from modules.backend.repositories.file import FileRepository
from modules.backend.repositories.note import NoteRepository
from modules.backend.services.base import BaseService


@dataclass
class IncomingFile:
    """One part of a multipart upload, independent of the web framework."""

    filename: str
    content_type: str
    size: int
    stream: BinaryIO


class FileService(BaseService):
    """Service for note attachments."""

    def __init__(
        self,
        session: AsyncSession,
        storage: FileStorage,
        limits: StorageSchema,
    ) -> None:
        super().__init__(session)
        self.repo = FileRepository(session)
        self.note_repo = NoteRepository(session)
        self.storage = storage
        self.limits = limits

    def validate_batch(self, files: list[IncomingFile]) -> None:
        """
        Check count, type and size of every file in the batch.

        Raises:
            ValidationError: If the batch is empty or has too many files
            UnsupportedMediaError: If any file type is not allowed
            PayloadTooLargeError: If any file exceeds the size ceiling
        """
        if not files:
            raise ValidationError("No files uploaded")
        if len(files) > self.limits.max_files_per_request:
            raise ValidationError(
                f"Too many files (max {self.limits.max_files_per_request} per request)",
                details={"count": len(files)},
            )

        allowed = set(self.limits.allowed_mime_types)
        max_mb = self.limits.max_file_size_bytes // (1024 * 1024)
        for incoming in files:
            if incoming.content_type not in allowed:
                raise UnsupportedMediaError(
                    f"File type not supported: {incoming.filename} ({incoming.content_type})"
                )
            if incoming.size > self.limits.max_file_size_bytes:
                raise PayloadTooLargeError(f"File too large: {incoming.filename} (max {max_mb}MB)")

    async def upload_files(self, note_id: str, files: list[IncomingFile]) -> list[FileAttachment]:
        """
        Store a batch of attachments for a note.

        Returns:
            Metadata rows of the stored files

        Raises:
            NotFoundError: If the note does not exist
            ValidationError, UnsupportedMediaError, PayloadTooLargeError: On an invalid batch
            StorageError: If writing payloads or rows fails (written payloads are removed)
        """
        if not await self.note_repo.exists(note_id):
            raise NotFoundError("Note not found")
        self.validate_batch(files)

        written: list[Path] = []
        rows: list[dict] = []
        try:
            for incoming in files:
                file_name = self.storage.generate_name(incoming.filename)
                path = await run_blocking(self.storage.save, incoming.stream, file_name)
                written.append(path)
                rows.append({
                    "note_id": note_id,
                    "original_name": incoming.filename,
                    "file_name": file_name,
                    "file_path": str(path),
                    "mime_type": incoming.content_type,
                    "size": incoming.size,
                })

            saved = await self._execute_db_operation("upload_files", self.repo.create_many(rows))
        except Exception:
            for path in written:
                await run_blocking(self.storage.delete, path)
            raise

        self._log_operation("Files uploaded", note_id=note_id, count=len(saved))
        return saved

    async def list_files(self, note_id: str) -> list[FileAttachment]:
        """Attachments of a note, oldest first (empty for unknown notes)."""
        return await self.repo.list_by_note(note_id)

    async def get_download(self, file_id: str) -> FileAttachment:
        """
        Resolve an attachment whose payload is present on disk.

        Raises:
            NotFoundError: If the row or the payload is missing
        """
        attachment = await self.repo.get_by_id(file_id)
        if not await run_blocking(self.storage.exists, attachment.file_path):
            self._logger.warning(
                "Attachment payload missing on disk",
                extra={"file_id": file_id, "path": attachment.file_path},
            )
            raise NotFoundError("File not found on disk")
        return attachment

    async def delete_file(self, file_id: str) -> None:
        """
        Delete an attachment row and its payload (tolerating a missing payload).

        The row deletion is committed before the payload is unlinked.

        Raises:
            NotFoundError: If the attachment does not exist
        """
        attachment = await self.repo.get_by_id(file_id)
        path = attachment.file_path

        self._log_operation("Deleting file", file_id=file_id, note_id=attachment.note_id)
        await self._execute_db_operation("delete_file", self.repo.delete(file_id))
        await self._execute_db_operation("delete_file", self.session.commit())
        await run_blocking(self.storage.delete, path)

    async def link_files(self, from_note_id: str, to_note_id: str) -> list[FileAttachment]:
        """
        Re-parent every attachment of one note to another.

        Returns:
            All attachments of the target note

        Raises:
            ValidationError: If both ids are the same
            NotFoundError: If either note does not exist
        """
        if from_note_id == to_note_id:
            raise ValidationError("Source and target notes must differ")
        for note_id in (from_note_id, to_note_id):
            if not await self.note_repo.exists(note_id):
                raise NotFoundError(f"Note not found: {note_id}")

        moved = await self._execute_db_operation(
            "link_files",
            self.repo.reassign(from_note_id, to_note_id),
        )
        self._log_operation("Files linked", from_note_id=from_note_id, to_note_id=to_note_id, count=moved)
        return await self.repo.list_by_note(to_note_id)
