"""
File Attachment Model.

Metadata for an uploaded payload. The bytes live on disk at ``file_path``.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from modules.backend.models.base import Base, CreatedAtMixin, UUIDMixin

if TYPE_CHECKING:
    from modules.backend.models.note import Note


class FileAttachment(UUIDMixin, CreatedAtMixin, Base):
    """File attachment belonging to exactly one note (cascade-deleted with it)."""

    __tablename__ = "files"

    note_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("notes.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_name: Mapped[str] = mapped_column(String(512), nullable=False)
    file_path: Mapped[str] = mapped_column(String(1024), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)

    note: Mapped["Note"] = relationship(back_populates="files")

    def __repr__(self) -> str:
        return f"<FileAttachment(id={self.id}, note_id={self.note_id!r}, name={self.original_name!r})>"
