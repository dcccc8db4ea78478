"""
Notepad HTTP Client.

Async client for the notepad backend. Mirrors the REST surface one
method per endpoint and turns non-2xx responses into ``ApiError``.
"""

from typing import Any, BinaryIO

import httpx

from modules.backend.core.config import get_app_config
from modules.backend.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

SOURCE = "client"

UploadPart = tuple[str, bytes | BinaryIO, str]
"""(filename, payload, content type) of one attachment to upload."""


class ApiError(Exception):
    """A request reached the backend and came back with an error envelope."""

    def __init__(self, status_code: int, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return f"{self.status_code} {self.code or 'ERROR'}: {self.message}"


def _flag(value: bool) -> str:
    return "1" if value else "0"


class NotepadClient:
    """
    HTTP client for the notepad API.

    Usage:
        async with NotepadClient() as client:
            await client.save_note("abc", "hello")
            note = await client.load_note("abc")
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: API root, e.g. http://127.0.0.1:3001/api. Defaults to client.yaml.
            timeout: Request timeout in seconds. Defaults to client.yaml.
            transport: Custom httpx transport (tests mount the ASGI app here).
        """
        if base_url is None or timeout is None:
            client_config = get_app_config().client
            base_url = base_url or client_config.base_url
            timeout = timeout if timeout is not None else client_config.timeout_seconds

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "NotepadClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"X-Client-Source": SOURCE},
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request and raise on an error response.

        Raises:
            ApiError: On a non-2xx response
            httpx.HTTPError: When the backend cannot be reached
        """
        client = self._get_client()
        log_with_source(logger, SOURCE, "debug", "API request", method=method, path=path)

        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log_with_source(
                logger, SOURCE, "warning", "API request failed",
                method=method, path=path, error=str(e),
            )
            raise

        if response.is_success:
            return response

        message, code = f"HTTP {response.status_code}", None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("error") or message
            code = body.get("code")

        log_with_source(
            logger, SOURCE, "warning", "API error response",
            method=method, path=path, status_code=response.status_code, code=code,
        )
        raise ApiError(response.status_code, message, code)

    # Notes

    async def save_note(
        self,
        key: str | None,
        content: str,
        password: str | None = None,
        url: str | None = None,
        monospace: bool = False,
        caret: int = 0,
    ) -> dict[str, Any]:
        """Save a note. Returns ``{"success", "key", "url", "message"}``."""
        payload: dict[str, Any] = {
            "pad": content,
            "pw": password or "",
            "url": url or "",
            "monospace": _flag(monospace),
            "caret": caret,
        }
        if key:
            payload["key"] = key
        response = await self.request("POST", "/save", json=payload)
        return response.json()

    async def load_note(self, note_id: str, password: str | None = None) -> dict[str, Any]:
        """Load a note. Encrypted notes without a password come back with ``pw == "1"`` and no pad."""
        params = {"pw": password} if password else None
        response = await self.request("GET", f"/load/{note_id}", params=params)
        return response.json()

    async def delete_note(self, note_id: str, password: str | None = None) -> None:
        params = {"pw": password} if password else None
        await self.request("DELETE", f"/delete/{note_id}", params=params)

    async def change_url(
        self, note_id: str, new_url: str, password: str | None = None
    ) -> dict[str, Any]:
        response = await self.request(
            "PUT",
            f"/change-url/{note_id}",
            json={"newUrl": new_url, "pw": password or ""},
        )
        return response.json()

    async def get_stats(self) -> dict[str, Any]:
        response = await self.request("GET", "/stats")
        return response.json()

    # Files

    async def upload_files(self, note_id: str, files: list[UploadPart]) -> list[dict[str, Any]]:
        """Upload attachments; the batch is accepted or rejected as a whole."""
        parts = [("files", part) for part in files]
        response = await self.request("POST", f"/upload/{note_id}", files=parts)
        return response.json()["files"]

    async def get_files(self, note_id: str) -> list[dict[str, Any]]:
        response = await self.request("GET", f"/files/{note_id}")
        return response.json()["files"]

    async def download_file(self, file_id: str) -> bytes:
        response = await self.request("GET", f"/file/{file_id}")
        return response.content

    async def delete_file(self, file_id: str) -> None:
        await self.request("DELETE", f"/file/{file_id}")

    async def link_files(self, from_note_id: str, to_note_id: str) -> list[dict[str, Any]]:
        response = await self.request(
            "POST",
            "/link-files",
            json={"fromNoteId": from_note_id, "toNoteId": to_note_id},
        )
        return response.json()["files"]

    async def health(self) -> dict[str, Any]:
        response = await self.request("GET", "/health")
        return response.json()
