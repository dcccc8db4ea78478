"""
Note Repository.

Data access layer for notes. Handles all database operations
for the Note model.
"""

from typing import Any

from sqlalchemy import case, func, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from modules.backend.core.utils import utc_now
from modules.backend.models.file import FileAttachment
from modules.backend.models.note import Note
from modules.backend.repositories.base import BaseRepository


class NoteRepository(BaseRepository[Note]):
    """
    Repository for Note model.

    Inherits standard CRUD operations from BaseRepository
    and adds upsert, slug moves and statistics.
    """

    model = Note
    label = "Note"

    async def upsert(self, note_id: str, **fields: Any) -> tuple[Note, bool]:
        """
        Insert the note or overwrite every given field of the existing row.

        ``created_at`` survives overwrites; ``updated_at`` is always refreshed.
        The last of several concurrent saves wins.

        Args:
            note_id: Note slug
            **fields: Column values to write

        Returns:
            Tuple of (note, created); ``created`` comes from a read before
            the write and is informational only
        """
        created = not await self.exists(note_id)
        now = utc_now()

        # ON CONFLICT UPDATE keeps the row and its attachments; REPLACE would delete them.
        stmt = sqlite_insert(Note).values(id=note_id, created_at=now, updated_at=now, **fields)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Note.id],
            set_={**fields, "updated_at": now},
        )
        await self.session.execute(stmt)

        result = await self.session.execute(
            select(Note).where(Note.id == note_id).execution_options(populate_existing=True)
        )
        return result.scalar_one(), created

    async def move(self, note: Note, new_id: str) -> Note:
        """
        Re-key a note under a new slug, carrying its attachments along.

        The new row is written first, attachments are re-pointed, then
        the old row is removed.

        Returns:
            The note stored under ``new_id``
        """
        old_id = note.id
        moved = Note(
            id=new_id,
            content=note.content,
            password_hash=note.password_hash,
            is_encrypted=note.is_encrypted,
            monospace=note.monospace,
            caret=note.caret,
            url=new_id,
            created_at=note.created_at,
        )
        self.session.add(moved)
        await self.session.flush()

        await self.session.execute(
            update(FileAttachment)
            .where(FileAttachment.note_id == old_id)
            .values(note_id=new_id)
        )
        await self.session.delete(note)
        await self.session.flush()
        await self.session.refresh(moved)
        return moved

    async def get_stats(self) -> dict[str, Any]:
        """
        Aggregate note counts.

        Returns:
            Dict with total, encrypted and public counts and the latest update time
        """
        result = await self.session.execute(
            select(
                func.count(Note.id),
                func.count(case((Note.is_encrypted.is_(True), 1))),
                func.count(case((Note.is_encrypted.is_(False), 1))),
                func.max(Note.updated_at),
            )
        )
        total, encrypted, public, last_updated = result.one()
        return {
            "total": total,
            "encrypted": encrypted,
            "public": public,
            "last_updated": last_updated,
        }
