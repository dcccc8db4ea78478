"""
File Repository.

Data access layer for attachment metadata.
"""

from sqlalchemy import select, update

from modules.backend.models.file import FileAttachment
from modules.backend.repositories.base import BaseRepository


class FileRepository(BaseRepository[FileAttachment]):
    """Repository for FileAttachment model."""

    model = FileAttachment
    label = "File"

    async def list_by_note(self, note_id: str) -> list[FileAttachment]:
        """Get all attachments of a note, oldest first."""
        result = await self.session.execute(
            select(FileAttachment)
            .where(FileAttachment.note_id == note_id)
            .order_by(FileAttachment.created_at.asc())
        )
        return list(result.scalars().all())

    async def create_many(self, rows: list[dict]) -> list[FileAttachment]:
        """Insert several attachment rows in one flush."""
        instances = [FileAttachment(**row) for row in rows]
        self.session.add_all(instances)
        await self.session.flush()
        for instance in instances:
            await self.session.refresh(instance)
        return instances

    async def reassign(self, from_note_id: str, to_note_id: str) -> int:
        """
        Move every attachment of one note to another.

        Returns:
            Number of attachments moved
        """
        result = await self.session.execute(
            update(FileAttachment)
            .where(FileAttachment.note_id == from_note_id)
            .values(note_id=to_note_id)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        return result.rowcount or 0
