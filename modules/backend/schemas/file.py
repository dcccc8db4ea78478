"""
File Schemas.

Attachment metadata as exchanged with the notepad client (camelCase keys).
"""

from datetime import datetime

from pydantic import Field

from modules.backend.schemas.base import ApiResponse, CamelModel


class FileMetadata(CamelModel):
    """Attachment metadata in API responses. The on-disk path is never exposed."""

    id: str
    note_id: str
    original_name: str
    file_name: str
    mime_type: str
    size: int
    created_at: datetime


class FileListResponse(ApiResponse):
    """Attachments of one note."""

    files: list[FileMetadata] = Field(default_factory=list)


class UploadResponse(FileListResponse):
    """Result of a successful upload batch."""

    message: str


class LinkFilesResponse(FileListResponse):
    """Attachments of the target note after a link."""

    message: str = "Files linked successfully"


class LinkFilesRequest(CamelModel):
    """Body of POST /api/link-files."""

    from_note_id: str = Field(min_length=1, max_length=255)
    to_note_id: str = Field(min_length=1, max_length=255)
