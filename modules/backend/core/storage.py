"""
Attachment Storage.

Local filesystem storage for uploaded attachment payloads. Metadata lives
in the ``files`` table; this module only deals with bytes on disk.

Payloads are stored flat under the configured upload directory as
``<uuid>-<original name>``. All methods are blocking; services call
them through core.concurrency.run_blocking.
"""

import re
import shutil
from pathlib import Path
from typing import BinaryIO
from uuid import uuid4

from modules.backend.core.exceptions import StorageError
from modules.backend.core.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._ -]")


def safe_file_name(original_name: str) -> str:
    """Strip directories and unusual characters from a client-supplied name."""
    name = Path(original_name.replace("\\", "/")).name
    name = _UNSAFE_CHARS.sub("_", name).strip(" .")
    return name or "file"


class FileStorage:
    """Stores attachment payloads under a single root directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    @classmethod
    def from_config(cls) -> "FileStorage":
        """Build the storage from config/settings/storage.yaml."""
        from modules.backend.core.config import get_app_config, resolve_project_path

        return cls(resolve_project_path(get_app_config().storage.upload_dir))

    def ensure_root(self) -> None:
        """Create the upload directory if it does not exist."""
        self.root.mkdir(parents=True, exist_ok=True)

    def generate_name(self, original_name: str) -> str:
        """Return a unique on-disk name that keeps the original name readable."""
        return f"{uuid4()}-{safe_file_name(original_name)}"

    def save(self, source: BinaryIO, file_name: str) -> Path:
        """
        Copy a stream into the upload directory.

        Returns:
            Absolute path of the written payload

        Raises:
            StorageError: If the payload cannot be written
        """
        self.ensure_root()
        target = self.root / file_name
        try:
            source.seek(0)
            with open(target, "wb") as out:
                shutil.copyfileobj(source, out)
        except OSError as e:
            logger.error("Failed to write attachment", extra={"path": str(target), "error": str(e)})
            target.unlink(missing_ok=True)
            raise StorageError("Failed to store file") from e
        return target.resolve()

    def delete(self, path: str | Path) -> bool:
        """
        Remove a payload, tolerating its absence.

        Returns:
            True if a file was removed, False if it was already gone
        """
        target = Path(path)
        try:
            target.unlink()
        except FileNotFoundError:
            logger.debug("Attachment already absent", extra={"path": str(target)})
            return False
        except OSError as e:
            logger.error("Failed to delete attachment", extra={"path": str(target), "error": str(e)})
            raise StorageError("Failed to delete file") from e
        return True

    def exists(self, path: str | Path) -> bool:
        """Check whether a payload is present on disk."""
        return Path(path).is_file()
