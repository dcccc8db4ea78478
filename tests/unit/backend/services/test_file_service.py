"""
Unit Tests for File Service.

Batch validation and upload cleanup with mocked repositories and
a real storage directory.
"""

import io
from pathlib import Path
from unittest.mock import patch

import pytest

from modules.backend.core.config_schema import StorageSchema
from modules.backend.core.exceptions import (
    NotFoundError,
    PayloadTooLargeError,
    StorageError,
    UnsupportedMediaError,
    ValidationError,
)
from modules.backend.core.storage import FileStorage
from modules.backend.services.file import FileService, IncomingFile

LIMITS = StorageSchema(
    upload_dir="unused",
    max_file_size_bytes=1024,
    max_files_per_request=3,
    allowed_mime_types=["image/png", "application/pdf"],
)


def incoming(name: str = "a.png", content_type: str = "image/png", data: bytes = b"data") -> IncomingFile:
    return IncomingFile(filename=name, content_type=content_type, size=len(data), stream=io.BytesIO(data))


@pytest.fixture
def storage(tmp_path):
    return FileStorage(tmp_path / "uploads")


@pytest.fixture
def service(mock_db_session, storage):
    return FileService(mock_db_session, storage, LIMITS)


class TestValidateBatch:
    """Tests for validate_batch."""

    def test_accepts_valid_batch(self, service):
        service.validate_batch([incoming(), incoming("b.pdf", "application/pdf")])

    def test_empty_batch(self, service):
        with pytest.raises(ValidationError, match="No files"):
            service.validate_batch([])

    def test_too_many_files(self, service):
        with pytest.raises(ValidationError, match="max 3"):
            service.validate_batch([incoming() for _ in range(4)])

    def test_disallowed_type(self, service):
        with pytest.raises(UnsupportedMediaError, match="evil.exe"):
            service.validate_batch([incoming(), incoming("evil.exe", "application/x-msdownload")])

    def test_oversized_file(self, service):
        with pytest.raises(PayloadTooLargeError, match="big.png"):
            service.validate_batch([incoming("big.png", data=b"x" * 1025)])

    def test_exact_limit_is_allowed(self, service):
        service.validate_batch([incoming(data=b"x" * 1024)])


class TestUploadFiles:
    """Tests for upload_files."""

    @pytest.mark.asyncio
    async def test_unknown_note(self, service):
        with patch.object(service.note_repo, "exists", return_value=False):
            with pytest.raises(NotFoundError):
                await service.upload_files("nope", [incoming()])

    @pytest.mark.asyncio
    async def test_invalid_batch_writes_nothing(self, service, storage):
        with patch.object(service.note_repo, "exists", return_value=True):
            with pytest.raises(UnsupportedMediaError):
                await service.upload_files("abc", [incoming(), incoming("x.txt", "text/plain")])

        assert not storage.root.exists() or not any(storage.root.iterdir())

    @pytest.mark.asyncio
    async def test_rows_describe_written_payloads(self, service, storage):
        with (
            patch.object(service.note_repo, "exists", return_value=True),
            patch.object(service.repo, "create_many", side_effect=lambda rows: rows) as mock_create,
        ):
            rows = await service.upload_files("abc", [incoming("../../a.png", data=b"png")])

        mock_create.assert_called_once()
        row = rows[0]
        assert row["note_id"] == "abc"
        assert row["original_name"] == "../../a.png"
        assert row["file_name"].endswith("-a.png")
        assert row["size"] == 3
        assert Path(row["file_path"]).read_bytes() == b"png"

    @pytest.mark.asyncio
    async def test_failed_insert_removes_payloads(self, service, storage):
        with (
            patch.object(service.note_repo, "exists", return_value=True),
            patch.object(service.repo, "create_many", side_effect=StorageError("boom")),
        ):
            with pytest.raises(StorageError):
                await service.upload_files("abc", [incoming(), incoming("b.pdf", "application/pdf")])

        assert list(storage.root.iterdir()) == []


class TestLinkFiles:
    """Tests for link_files."""

    @pytest.mark.asyncio
    async def test_same_note_rejected(self, service):
        with pytest.raises(ValidationError):
            await service.link_files("abc", "abc")

    @pytest.mark.asyncio
    async def test_missing_target(self, service):
        with patch.object(service.note_repo, "exists", side_effect=[True, False]):
            with pytest.raises(NotFoundError, match="def"):
                await service.link_files("abc", "def")
