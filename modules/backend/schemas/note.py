"""
Note Schemas.

Pydantic schemas for the save/load wire format. Field names follow the
notepad client: ``pad`` is the content, ``pw`` the password on requests
and the "encrypted" flag ('0'/'1') on responses.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from modules.backend.schemas.base import ApiResponse, CamelModel
from modules.backend.schemas.file import FileMetadata

Flag = Literal["0", "1"]


def _to_flag(value: Any) -> Any:
    """Accept '0'/'1', 0/1 and booleans for flag fields."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    return value


class SaveNoteRequest(BaseModel):
    """Body of POST /api/save (JSON or form encoded)."""

    key: str | None = Field(default=None, max_length=255, description="Note slug")
    pad: str = Field(default="", description="Note content (ciphertext when encrypted)")
    pw: str = Field(default="", description="Optional password; empty means unencrypted")
    url: str = Field(default="", max_length=255, description="Custom slug")
    monospace: Flag = Field(default="0", description="Monospace display flag")
    caret: int = Field(default=0, ge=0, description="Cursor offset")

    @field_validator("monospace", mode="before")
    @classmethod
    def _coerce_monospace(cls, value: Any) -> Any:
        return _to_flag(value)

    @field_validator("caret", mode="before")
    @classmethod
    def _blank_caret(cls, value: Any) -> Any:
        return 0 if value in ("", None) else value


class SaveNoteResponse(ApiResponse):
    key: str
    url: str
    message: str = "Note saved successfully"


class LoadNoteResponse(ApiResponse):
    """
    Body of GET /api/load/{id}.

    For an encrypted note loaded without a password, ``pad`` is empty,
    ``pw`` is '1' and ``files`` is empty: the client must prompt for
    the password and load again.
    """

    key: str
    pad: str
    pw: Flag
    url: str
    monospace: Flag
    caret: int
    files: list[FileMetadata] = Field(default_factory=list)


class ChangeUrlRequest(CamelModel):
    """Body of PUT /api/change-url/{id}."""

    new_url: str = Field(min_length=1, max_length=255)
    pw: str = ""


class ChangeUrlResponse(ApiResponse):
    key: str
    url: str
    message: str = "URL changed successfully"


class NoteStatsResponse(CamelModel):
    success: bool = True
    total_notes: int
    encrypted_notes: int
    public_notes: int
    last_updated: datetime | None = None
