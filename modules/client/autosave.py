"""
Auto-save.

Debounced saving of a note while it is being edited. Every edit marks
the note dirty and restarts an idle timer; when the timer runs out the
latest content is sent to the backend. A failed save is kept in the
local fallback cache instead of being retried.

Usage:
    async with NotepadClient() as client:
        session = EncryptedNoteSession(client, "abc", password="hunter2")
        text = await session.load()
        session.edit(text + " more")
        ...
        await session.flush()
        session.close()
"""

import asyncio
import enum
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from modules.backend.core.config import get_app_config
from modules.backend.core.logging import get_logger, log_with_source
from modules.client.api import ApiError, NotepadClient
from modules.client.encryption import decrypt, encrypt
from modules.client.storage import LocalNoteCache

logger = get_logger(__name__)

SOURCE = "client"

SaveFunction = Callable[[str], Awaitable[Any]]


class SaveState(str, enum.Enum):
    CLEAN = "clean"
    DIRTY = "dirty"


class PasswordRequiredError(Exception):
    """The note is password protected and no password was given."""


class AutoSaveController:
    """
    Debounces edits into saves.

    Saves run one at a time in the order they were triggered, so the
    newest content is always the last one written. An edit made while a
    save is in flight restarts the timer and never cancels the request.
    """

    def __init__(
        self,
        save: SaveFunction,
        note_id: str,
        cache: LocalNoteCache | None = None,
        password: str | None = None,
        idle_interval: float | None = None,
    ) -> None:
        if idle_interval is None:
            idle_interval = get_app_config().client.autosave_idle_seconds
        if idle_interval <= 0:
            raise ValueError("idle_interval must be positive")

        self._save = save
        self.note_id = note_id
        self.cache = cache
        self.password = password
        self.idle_interval = idle_interval

        self.state = SaveState.CLEAN
        self._content = ""
        self._version = 0
        self._timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def content(self) -> str:
        return self._content

    @property
    def pending(self) -> bool:
        """True while an idle timer is armed."""
        return self._timer is not None

    def edit(self, content: str) -> None:
        """Record new content and restart the idle timer."""
        if self._closed:
            raise RuntimeError("Auto-save controller is closed")

        self._content = content
        self._version += 1
        self.state = SaveState.DIRTY

        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.idle_interval, self._on_idle)

    def reset(self, content: str) -> None:
        """Adopt freshly loaded content as the saved baseline."""
        self._cancel_timer()
        self._content = content
        self.state = SaveState.CLEAN

    def _on_idle(self) -> None:
        self._timer = None
        task = asyncio.create_task(self._save_latest())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def flush(self) -> bool:
        """
        Save now if there are unsaved edits.

        Returns:
            True if the backend accepted the content, False if nothing was
            pending or the save fell back to the local cache
        """
        self._cancel_timer()
        if self.state is not SaveState.DIRTY:
            return False
        return await self._save_latest()

    def close(self) -> None:
        """Stop the timer without saving; unsaved edits are dropped."""
        self._cancel_timer()
        self._closed = True

    async def wait_idle(self) -> None:
        """Wait for saves already in flight."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _save_latest(self) -> bool:
        async with self._lock:
            if self.state is not SaveState.DIRTY:
                return False

            content, version = self._content, self._version
            try:
                await self._save(content)
                saved = True
            except (httpx.HTTPError, ApiError) as e:
                log_with_source(
                    logger, SOURCE, "warning", "Auto-save failed, keeping local copy",
                    note_id=self.note_id, error=str(e),
                )
                saved = False

            try:
                await self._store_locally(content)
            except OSError:
                logger.exception("Writing fallback cache failed", extra={"note_id": self.note_id})

            if version == self._version:
                self.state = SaveState.CLEAN
            return saved

    async def _store_locally(self, content: str) -> None:
        if self.cache is None:
            return
        is_encrypted = bool(self.password)
        stored = encrypt(content, self.password) if is_encrypted else content

        def write() -> None:
            self.cache.save_note(self.note_id, stored, is_encrypted=is_encrypted)
            self.cache.save_current(stored)

        await asyncio.to_thread(write)


class EncryptedNoteSession:
    """
    One open note: client-side encryption plus auto-save.

    With a password, content is encrypted before it leaves the client
    and decrypted after it arrives, so the backend only stores ciphertext.
    Without one, content travels as plain text.
    """

    def __init__(
        self,
        client: NotepadClient,
        note_id: str,
        password: str | None = None,
        cache: LocalNoteCache | None = None,
        idle_interval: float | None = None,
        monospace: bool = False,
    ) -> None:
        self.client = client
        self.note_id = note_id
        self.password = password or None
        self.cache = cache
        self.monospace = monospace
        self.caret = 0
        self.files: list[dict[str, Any]] = []
        self.autosave = AutoSaveController(
            self.save,
            note_id,
            cache=cache,
            password=self.password,
            idle_interval=idle_interval,
        )

    async def load(self) -> str:
        """
        Fetch and decrypt the note.

        A note that does not exist yet loads as empty text. When the
        backend is unreachable the cached copy is used instead.

        Raises:
            PasswordRequiredError: If the note is protected and no password is set
            ApiError: If the password is wrong
            DecryptionError: If the content cannot be decrypted with the password
        """
        try:
            data = await self.client.load_note(self.note_id, self.password)
        except ApiError as e:
            if e.status_code == 404:
                return ""
            raise
        except httpx.HTTPError:
            log_with_source(logger, SOURCE, "warning", "Backend unreachable, loading cached copy",
                            note_id=self.note_id)
            return self._load_cached()

        if data.get("pw") == "1" and not self.password:
            raise PasswordRequiredError(f"Note {self.note_id} is password protected")

        self.monospace = data.get("monospace") == "1"
        self.caret = int(data.get("caret") or 0)
        self.files = data.get("files", [])

        # The server flag decides; a password held for a public note only
        # takes effect on the next save, which encrypts and protects it.
        pad = data.get("pad", "")
        content = decrypt(pad, self.password) if data.get("pw") == "1" and pad else pad
        self.autosave.reset(content)
        return content

    def _load_cached(self) -> str:
        entry = self.cache.get_note(self.note_id) if self.cache else None
        if not entry:
            return ""
        if entry.get("isEncrypted"):
            if not self.password:
                raise PasswordRequiredError(f"Note {self.note_id} is password protected")
            return decrypt(entry["content"], self.password)
        return entry["content"]

    async def save(self, content: str) -> dict[str, Any]:
        """Encrypt (when protected) and send the content."""
        payload = encrypt(content, self.password) if self.password else content
        return await self.client.save_note(
            self.note_id,
            payload,
            password=self.password,
            monospace=self.monospace,
            caret=self.caret,
        )

    def edit(self, content: str, caret: int | None = None) -> None:
        if caret is not None:
            self.caret = caret
        self.autosave.edit(content)

    async def flush(self) -> bool:
        return await self.autosave.flush()

    def close(self) -> None:
        self.autosave.close()
