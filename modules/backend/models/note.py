"""
Note Model.

A note is addressed by its slug (``id``), which is also the URL path
segment the note is shared under.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from modules.backend.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from modules.backend.models.file import FileAttachment


class Note(TimestampMixin, Base):
    """
    Note database model.

    ``password_hash`` is set if and only if ``is_encrypted`` is true. When
    encrypted, ``content`` holds whatever the client sent, normally the
    ciphertext produced by modules.client.encryption.
    """

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    password_hash: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    is_encrypted: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    monospace: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    caret: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    url: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    files: Mapped[list["FileAttachment"]] = relationship(
        back_populates="note",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="FileAttachment.created_at",
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id!r}, encrypted={self.is_encrypted})>"
