"""
Notes API Endpoints.

Save/load/delete of notes, slug changes and statistics.
"""

from fastapi import APIRouter, Query, Request

from modules.backend.core.dependencies import DbSession, RequestId, Storage, parse_body
from modules.backend.schemas.base import MessageResponse
from modules.backend.schemas.file import FileMetadata
from modules.backend.schemas.note import (
    ChangeUrlRequest,
    ChangeUrlResponse,
    LoadNoteResponse,
    NoteStatsResponse,
    SaveNoteRequest,
    SaveNoteResponse,
)
from modules.backend.services.note import NoteService

router = APIRouter()


@router.post(
    "/save",
    response_model=SaveNoteResponse,
    summary="Save a note",
    description="Create or overwrite a note. A non-empty `pw` password-protects it.",
)
async def save_note(
    request: Request,
    db: DbSession,
    request_id: RequestId,
) -> SaveNoteResponse:
    """Upsert a note from a JSON or form-encoded body."""
    data = await parse_body(request, SaveNoteRequest)
    service = NoteService(db)
    note = await service.save_note(
        key=data.key,
        content=data.pad,
        password=data.pw or None,
        url=data.url or None,
        monospace=data.monospace == "1",
        caret=data.caret,
    )
    return SaveNoteResponse(key=note.id, url=data.url)


@router.get(
    "/load/{note_id}",
    response_model=LoadNoteResponse,
    summary="Load a note",
    description=(
        "Load a note. Encrypted notes loaded without `pw` come back with an "
        "empty pad and `pw='1'`; a wrong `pw` is rejected with 401."
    ),
)
async def load_note(
    note_id: str,
    db: DbSession,
    request_id: RequestId,
    pw: str | None = Query(default=None, description="Note password"),
) -> LoadNoteResponse:
    """Load a note by slug."""
    service = NoteService(db)
    result = await service.load_note(note_id, pw)
    note = result.note
    return LoadNoteResponse(
        key=note.id,
        pad=result.content,
        pw="1" if note.is_encrypted else "0",
        url=note.url or "",
        monospace="1" if note.monospace else "0",
        caret=note.caret or 0,
        files=[FileMetadata.model_validate(f) for f in result.files],
    )


@router.delete(
    "/delete/{note_id}",
    response_model=MessageResponse,
    summary="Delete a note",
    description="Delete a note and all of its attachments. Encrypted notes need `pw`.",
)
async def delete_note(
    note_id: str,
    db: DbSession,
    storage: Storage,
    request_id: RequestId,
    pw: str | None = Query(default=None, description="Note password"),
) -> MessageResponse:
    """Delete a note."""
    service = NoteService(db, storage)
    await service.delete_note(note_id, pw)
    return MessageResponse(message="Note deleted successfully")


@router.put(
    "/change-url/{note_id}",
    response_model=ChangeUrlResponse,
    summary="Change a note URL",
    description="Move a note and its attachments to a new slug.",
)
async def change_url(
    note_id: str,
    request: Request,
    db: DbSession,
    request_id: RequestId,
) -> ChangeUrlResponse:
    """Re-key a note under a new slug."""
    data = await parse_body(request, ChangeUrlRequest)
    service = NoteService(db)
    note = await service.change_url(note_id, data.new_url, data.pw or None)
    return ChangeUrlResponse(key=note.id, url=note.url or note.id)


@router.get(
    "/stats",
    response_model=NoteStatsResponse,
    response_model_by_alias=True,
    summary="Note statistics",
)
async def note_stats(
    db: DbSession,
    request_id: RequestId,
) -> NoteStatsResponse:
    """Count total, encrypted and public notes."""
    stats = await NoteService(db).get_stats()
    return NoteStatsResponse(
        total_notes=stats["total"],
        encrypted_notes=stats["encrypted"],
        public_notes=stats["public"],
        last_updated=stats["last_updated"],
    )
