"""
Files API Endpoints.

Attachment upload, listing, download and deletion.
"""

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import FileResponse

from modules.backend.core.dependencies import (
    DbSession,
    RequestId,
    Storage,
    StorageLimits,
)
from modules.backend.schemas.base import MessageResponse
from modules.backend.schemas.file import (
    FileListResponse,
    FileMetadata,
    LinkFilesRequest,
    LinkFilesResponse,
    UploadResponse,
)
from modules.backend.services.file import FileService, IncomingFile

router = APIRouter()


def _measure(upload: UploadFile) -> int:
    """Size of an upload; falls back to seeking when the part had no length."""
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, 2)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


@router.post(
    "/upload/{note_id}",
    response_model=UploadResponse,
    summary="Upload attachments",
    description=(
        "Attach up to 10 files (5MB each, images, PDF and Office documents) "
        "to a note. One invalid file rejects the whole batch."
    ),
)
async def upload_files(
    note_id: str,
    db: DbSession,
    storage: Storage,
    limits: StorageLimits,
    request_id: RequestId,
    files: list[UploadFile] = File(default=[], description="Files to attach"),
) -> UploadResponse:
    """Store uploaded files for a note."""
    incoming = [
        IncomingFile(
            filename=upload.filename or "file",
            content_type=upload.content_type or "application/octet-stream",
            size=_measure(upload),
            stream=upload.file,
        )
        for upload in files
    ]
    service = FileService(db, storage, limits)
    try:
        saved = await service.upload_files(note_id, incoming)
    finally:
        for upload in files:
            await upload.close()

    return UploadResponse(
        files=[FileMetadata.model_validate(f) for f in saved],
        message=f"{len(saved)} file(s) uploaded successfully",
    )


@router.get(
    "/files/{note_id}",
    response_model=FileListResponse,
    summary="List attachments",
)
async def list_files(
    note_id: str,
    db: DbSession,
    storage: Storage,
    limits: StorageLimits,
    request_id: RequestId,
) -> FileListResponse:
    """List the attachments of a note."""
    files = await FileService(db, storage, limits).list_files(note_id)
    return FileListResponse(files=[FileMetadata.model_validate(f) for f in files])


@router.get(
    "/file/{file_id}",
    summary="Download an attachment",
    response_class=FileResponse,
)
async def download_file(
    file_id: str,
    db: DbSession,
    storage: Storage,
    limits: StorageLimits,
    request_id: RequestId,
) -> FileResponse:
    """Stream an attachment back under its original name."""
    attachment = await FileService(db, storage, limits).get_download(file_id)
    return FileResponse(
        path=attachment.file_path,
        media_type=attachment.mime_type,
        filename=attachment.original_name,
    )


@router.delete(
    "/file/{file_id}",
    response_model=MessageResponse,
    summary="Delete an attachment",
)
async def delete_file(
    file_id: str,
    db: DbSession,
    storage: Storage,
    limits: StorageLimits,
    request_id: RequestId,
) -> MessageResponse:
    """Delete an attachment and its payload."""
    await FileService(db, storage, limits).delete_file(file_id)
    return MessageResponse(message="File deleted successfully")


@router.post(
    "/link-files",
    response_model=LinkFilesResponse,
    summary="Move attachments to another note",
)
async def link_files(
    data: LinkFilesRequest,
    db: DbSession,
    storage: Storage,
    limits: StorageLimits,
    request_id: RequestId,
) -> LinkFilesResponse:
    """Re-parent the attachments of one note to another."""
    files = await FileService(db, storage, limits).link_files(data.from_note_id, data.to_note_id)
    return LinkFilesResponse(files=[FileMetadata.model_validate(f) for f in files])
