# SQLAlchemy models package. Importing it registers every table on Base.metadata.
from modules.backend.models.base import Base
from modules.backend.models.file import FileAttachment
from modules.backend.models.note import Note
from modules.backend.models.user import User

__all__ = [
    "Base",
    "FileAttachment",
    "Note",
    "User",
]
