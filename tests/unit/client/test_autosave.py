"""
Unit Tests for Auto-save.

Uses short idle intervals and an AsyncMock in place of the backend.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from modules.client.api import ApiError
from modules.client.autosave import AutoSaveController, SaveState
from modules.client.encryption import decrypt
from modules.client.storage import LocalNoteCache

IDLE = 0.05


@pytest.fixture
def cache(tmp_path):
    return LocalNoteCache(tmp_path / "notes.json")


class TestDebounce:
    @pytest.mark.asyncio
    async def test_saves_once_after_idle(self):
        save = AsyncMock()
        controller = AutoSaveController(save, "abc", idle_interval=IDLE)

        controller.edit("a")
        controller.edit("ab")
        controller.edit("abc")
        assert controller.state is SaveState.DIRTY
        assert controller.pending

        await asyncio.sleep(IDLE * 4)
        await controller.wait_idle()

        save.assert_awaited_once_with("abc")
        assert controller.state is SaveState.CLEAN
        assert not controller.pending

    @pytest.mark.asyncio
    async def test_each_edit_restarts_timer(self):
        save = AsyncMock()
        controller = AutoSaveController(save, "abc", idle_interval=IDLE * 4)

        for text in ("a", "ab", "abc", "abcd"):
            controller.edit(text)
            await asyncio.sleep(IDLE)

        save.assert_not_awaited()

        await asyncio.sleep(IDLE * 8)
        await controller.wait_idle()
        save.assert_awaited_once_with("abcd")

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            AutoSaveController(AsyncMock(), "abc", idle_interval=0)


class TestFlushAndClose:
    @pytest.mark.asyncio
    async def test_flush_saves_immediately(self):
        save = AsyncMock()
        controller = AutoSaveController(save, "abc", idle_interval=60)

        controller.edit("now")

        assert await controller.flush() is True
        save.assert_awaited_once_with("now")
        assert not controller.pending

    @pytest.mark.asyncio
    async def test_flush_when_clean_does_nothing(self):
        save = AsyncMock()
        controller = AutoSaveController(save, "abc", idle_interval=60)

        assert await controller.flush() is False
        save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_close_drops_pending_edit(self):
        save = AsyncMock()
        controller = AutoSaveController(save, "abc", idle_interval=IDLE)

        controller.edit("unsaved")
        controller.close()
        await asyncio.sleep(IDLE * 4)

        save.assert_not_awaited()
        with pytest.raises(RuntimeError):
            controller.edit("after close")

    @pytest.mark.asyncio
    async def test_reset_adopts_loaded_content(self):
        controller = AutoSaveController(AsyncMock(), "abc", idle_interval=60)
        controller.edit("draft")

        controller.reset("loaded")

        assert controller.content == "loaded"
        assert controller.state is SaveState.CLEAN
        assert not controller.pending


class TestFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [httpx.ConnectError("offline"), ApiError(500, "Internal server error", "SYS_INTERNAL_ERROR")],
    )
    async def test_failed_save_goes_to_cache(self, cache, error):
        save = AsyncMock(side_effect=error)
        controller = AutoSaveController(save, "abc", cache=cache, idle_interval=60)

        controller.edit("keep me")

        assert await controller.flush() is False
        assert cache.get_note("abc")["content"] == "keep me"
        assert cache.get_current() == "keep me"
        assert controller.state is SaveState.CLEAN

    @pytest.mark.asyncio
    async def test_cache_holds_ciphertext_when_protected(self, cache):
        controller = AutoSaveController(
            AsyncMock(side_effect=httpx.ConnectError("offline")),
            "abc",
            cache=cache,
            password="hunter2",
            idle_interval=60,
        )

        controller.edit("private")
        await controller.flush()

        entry = cache.get_note("abc")
        assert entry["isEncrypted"] is True
        assert entry["content"] != "private"
        assert decrypt(entry["content"], "hunter2") == "private"
        assert "hunter2" not in cache.path.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_unwritable_cache_after_failed_save_still_cleans(self):
        broken_cache = MagicMock()
        broken_cache.save_note.side_effect = OSError("disk full")
        controller = AutoSaveController(
            AsyncMock(side_effect=httpx.ConnectError("offline")),
            "abc",
            cache=broken_cache,
            idle_interval=60,
        )

        controller.edit("lost")

        assert await controller.flush() is False
        assert controller.state is SaveState.CLEAN
        broken_cache.save_note.assert_called_once()

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self):
        controller = AutoSaveController(AsyncMock(side_effect=KeyError("bug")), "abc", idle_interval=60)
        controller.edit("x")

        with pytest.raises(KeyError):
            await controller.flush()


class TestConcurrentEdits:
    @pytest.mark.asyncio
    async def test_edit_during_save_stays_dirty(self):
        started = asyncio.Event()
        release = asyncio.Event()
        saved: list[str] = []

        async def slow_save(content: str) -> None:
            started.set()
            await release.wait()
            saved.append(content)

        controller = AutoSaveController(slow_save, "abc", idle_interval=60)
        controller.edit("first")
        flush = asyncio.create_task(controller.flush())
        await started.wait()

        controller.edit("second")
        release.set()
        assert await flush is True

        assert saved == ["first"]
        assert controller.state is SaveState.DIRTY

        assert await controller.flush() is True
        assert saved == ["first", "second"]
        assert controller.state is SaveState.CLEAN
