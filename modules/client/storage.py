"""
Local Fallback Cache.

JSON file holding the last known content of every note the client has
touched, plus the note currently open. Successful saves are mirrored
here and failed saves land here, so an unreachable backend never loses
the latest text.

Layout:
    {
        "notes": {"<note id>": {"content", "isEncrypted", "createdAt", "updatedAt"}},
        "current": "<content of the open note>"
    }

Content of a password-protected note is stored encrypted; the password
itself is never written.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from modules.backend.core.config import get_app_config, resolve_project_path
from modules.backend.core.logging import get_logger
from modules.backend.core.utils import utc_now

logger = get_logger(__name__)


class LocalNoteCache:
    """File-backed cache of note content keyed by note id."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    @classmethod
    def from_config(cls) -> "LocalNoteCache":
        """Cache at ``fallback_cache_path`` from client.yaml."""
        return cls(resolve_project_path(get_app_config().client.fallback_cache_path))

    def _read(self) -> dict[str, Any]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {"notes": {}, "current": ""}
        except json.JSONDecodeError:
            logger.warning("Fallback cache is corrupt, starting empty", extra={"path": str(self.path)})
            return {"notes": {}, "current": ""}

        if not isinstance(data, dict):
            return {"notes": {}, "current": ""}
        data.setdefault("notes", {})
        data.setdefault("current", "")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        """Replace the file atomically so a crash never leaves half a document."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".notepad-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def save_note(self, note_id: str, content: str, is_encrypted: bool = False) -> None:
        """Store (or overwrite) the content of a note."""
        data = self._read()
        now = utc_now().isoformat()
        previous = data["notes"].get(note_id) or {}
        data["notes"][note_id] = {
            "content": content,
            "isEncrypted": is_encrypted,
            "createdAt": previous.get("createdAt", now),
            "updatedAt": now,
        }
        self._write(data)

    def get_note(self, note_id: str) -> dict[str, Any] | None:
        return self._read()["notes"].get(note_id)

    def all_notes(self) -> dict[str, dict[str, Any]]:
        return self._read()["notes"]

    def delete_note(self, note_id: str) -> bool:
        """Drop a note; returns False when it was not cached."""
        data = self._read()
        if data["notes"].pop(note_id, None) is None:
            return False
        self._write(data)
        return True

    def save_current(self, content: str) -> None:
        data = self._read()
        data["current"] = content
        self._write(data)

    def get_current(self) -> str:
        return self._read()["current"]
