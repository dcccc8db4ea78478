"""
SQLAlchemy Base Model.

Declarative base and the column mixins shared by notes, attachments and
users. Timestamps are naive UTC (see core.utils.utc_now).
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from modules.backend.core.utils import utc_now


class Base(DeclarativeBase):
    pass


class CreatedAtMixin:
    """Creation time, set once on insert."""

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)


class TimestampMixin(CreatedAtMixin):
    """Creation time plus an update time refreshed on every UPDATE."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )


class UUIDMixin:
    """Random UUID string primary key (attachments and users; notes use their slug)."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
