"""
HTTP Client for the Notes API.

Async client with one method per route. Responses are unwrapped from the
standard envelope and parsed into the same Pydantic models the server
returns. All requests carry an X-Frontend-ID header for log routing.
"""

import base64
import mimetypes
from pathlib import Path
from typing import Any

import httpx

from modules.backend.core.config import get_server_base_url
from modules.backend.core.logging import get_logger, log_with_source
from modules.backend.schemas.image import ImageResponse, ImageSummary, ImageUpload
from modules.backend.schemas.note import (
    NoteCreate,
    NoteMove,
    NotePathEntry,
    NoteResponse,
    NoteUpdate,
)

logger = get_logger(__name__)


class ApiError(Exception):
    """Raised for any non-2xx response from the notes API."""

    def __init__(self, status_code: int, message: str, code: str | None = None) -> None:
        self.status_code = status_code
        self.message = message
        self.code = code
        super().__init__(f"{status_code}: {message}")


def split_data_url(data: str) -> tuple[str, str | None]:
    """
    Split a data URL into its base64 payload and mimetype.

    Plain base64 strings are returned unchanged with no mimetype.

        >>> split_data_url("data:image/png;base64,iVBO")
        ('iVBO', 'image/png')
    """
    if not data.startswith("data:") or "," not in data:
        return data, None
    header, payload = data.split(",", 1)
    mimetype = header[len("data:"):].split(";", 1)[0] or None
    return payload, mimetype


class NotesClient:
    """
    HTTP client for the notes API.

    Usage:
        async with NotesClient() as client:
            notes = await client.list_notes()
            note = await client.create_note("Ideas", parent_id=notes[0].id)
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        frontend: str = "client",
        api_prefix: str = "/api",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Server base URL. If None, read from config/settings/application.yaml.
            timeout: Request timeout in seconds. If None, read from application.yaml.
            frontend: Value of the X-Frontend-ID header, also used as log source.
            api_prefix: Path prefix the API is mounted under.
            transport: Optional httpx transport, e.g. an ASGITransport in tests.
        """
        if base_url is None:
            base_url, config_timeout = get_server_base_url()
            timeout = timeout if timeout is not None else config_timeout

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else 30.0
        self.frontend = frontend
        self.api_prefix = api_prefix.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "NotesClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"X-Frontend-ID": self.frontend},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request to an API path and return the raw response.

        Raises:
            httpx.HTTPError: On transport failure
        """
        client = await self._get_client()
        url = f"{self.api_prefix}{path}"

        log_with_source(logger, self.frontend, "debug", "API request", method=method, path=url)

        try:
            response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            log_with_source(
                logger,
                self.frontend,
                "error",
                "API request failed",
                method=method,
                path=url,
                error=str(e),
            )
            raise

        log_with_source(
            logger,
            self.frontend,
            "debug",
            "API response",
            method=method,
            path=url,
            status_code=response.status_code,
        )
        return response

    async def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and unwrap the envelope's data field."""
        response = await self.request(method, path, **kwargs)
        if response.is_success:
            return response.json().get("data")

        try:
            body = response.json()
        except ValueError:
            body = {}
        raise ApiError(
            response.status_code,
            body.get("error") or response.reason_phrase,
            body.get("code"),
        )

    # --- notes ---------------------------------------------------------------

    async def list_notes(self) -> list[NoteResponse]:
        data = await self._call("GET", "/notes")
        return [NoteResponse.model_validate(item) for item in data]

    async def get_note(self, note_id: int) -> NoteResponse | None:
        """Fetch one note; None if it does not exist."""
        try:
            data = await self._call("GET", f"/notes/{note_id}")
        except ApiError as e:
            if e.status_code == 404:
                return None
            raise
        return NoteResponse.model_validate(data)

    async def get_children(self, parent_id: int | None = None) -> list[NoteResponse]:
        """Direct children of parent_id, or the root notes when None."""
        segment = "null" if parent_id is None else str(parent_id)
        data = await self._call("GET", f"/notes/by-parent/{segment}")
        return [NoteResponse.model_validate(item) for item in data]

    async def search_notes(self, text: str) -> list[NoteResponse]:
        data = await self._call("GET", "/search", params={"q": text})
        return [NoteResponse.model_validate(item) for item in data]

    async def create_note(
        self,
        name: str,
        parent_id: int | None = None,
        content: str | None = None,
    ) -> NoteResponse:
        body = NoteCreate(name=name, parent_id=parent_id, content=content)
        data = await self._call(
            "POST",
            "/notes",
            json=body.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        return NoteResponse.model_validate(data)

    async def update_note(self, note_id: int, name: str, content: str) -> NoteResponse:
        body = NoteUpdate(name=name, content=content)
        data = await self._call(
            "PUT",
            f"/notes/{note_id}",
            json=body.model_dump(mode="json", by_alias=True),
        )
        return NoteResponse.model_validate(data)

    async def delete_note(self, note_id: int) -> NoteResponse:
        """Delete a note and its subtree; returns the deleted note."""
        data = await self._call("DELETE", f"/notes/{note_id}")
        return NoteResponse.model_validate(data)

    async def move_note(self, note_id: int, new_parent_id: int | None) -> NoteResponse:
        body = NoteMove(new_parent_id=new_parent_id)
        data = await self._call(
            "POST",
            f"/notes/{note_id}/move",
            json=body.model_dump(mode="json", by_alias=True),
        )
        return NoteResponse.model_validate(data)

    async def rename_note(self, note_id: int, name: str) -> NoteResponse:
        """
        Change a note's name and keep its content.

        Raises:
            ApiError: 404 if the note does not exist
        """
        note = await self.get_note(note_id)
        if note is None:
            raise ApiError(404, "Note not found", "RES_NOT_FOUND")
        return await self.update_note(note_id, name, note.content)

    async def get_note_path(self, note_id: int) -> list[NotePathEntry]:
        """Ancestors of a note from the root down, ending with the note."""
        data = await self._call("GET", f"/notes/{note_id}/path")
        return [NotePathEntry.model_validate(item) for item in data]

    # --- images --------------------------------------------------------------

    async def upload_image(
        self,
        filename: str,
        data: bytes | str,
        mimetype: str | None = None,
    ) -> ImageSummary:
        """
        Upload an image.

        Args:
            filename: Original file name
            data: Raw bytes, a base64 string, or a data URL
            mimetype: Image type; taken from the data URL or the filename if omitted
        """
        if isinstance(data, bytes):
            payload = base64.b64encode(data).decode("ascii")
        else:
            payload, url_mimetype = split_data_url(data)
            mimetype = mimetype or url_mimetype

        mimetype = mimetype or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        body = ImageUpload(filename=filename, mimetype=mimetype, data=payload)
        result = await self._call(
            "POST",
            "/images",
            json=body.model_dump(mode="json", by_alias=True),
        )
        return ImageSummary.model_validate(result)

    async def upload_image_file(self, path: str | Path) -> ImageSummary:
        """Upload an image file from disk; mimetype is guessed from its name."""
        path = Path(path)
        return await self.upload_image(path.name, path.read_bytes())

    async def get_image(self, image_id: str) -> ImageResponse:
        data = await self._call("GET", f"/images/{image_id}")
        return ImageResponse.model_validate(data)

    # --- health --------------------------------------------------------------

    async def health(self, ready: bool = True) -> tuple[int, dict[str, Any]]:
        """Probe the server; returns status code and body. Not under the API prefix."""
        client = await self._get_client()
        response = await client.get("/health/ready" if ready else "/health")
        return response.status_code, response.json()
