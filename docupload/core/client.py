"""Async HTTP client for the document server's upload endpoints.

Maps HTTP failures onto the docupload exception hierarchy. The client never
retries on its own; retry policy belongs to the upload manager.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx
import pydantic

from docupload.core.config import DEFAULT_HTTP_TIMEOUT_SECONDS
from docupload.core.exceptions import (
    AuthenticationError,
    NetworkError,
    PermissionDeniedError,
    RateLimitedError,
    ResourceNotFoundError,
    ServerUnreachableError,
    ServerValidationError,
    UploadError,
)
from docupload.core.validation import validate_server_url
from docupload.models.document import Document
from docupload.models.source import FileSource

# =============================================================================
# Constants
# =============================================================================

CHUNK_PATH = "/documents/chunk"
FINALIZE_PATH = "/documents/chunk/{file_id}/finalize"
DOCUMENTS_PATH = "/documents"

# Form field name the server reads the chunk payload from
CHUNK_FIELD = "chunk"
CHUNK_FILENAME = "blob"

ByteProgressCallback = Callable[[int, int], None]


# =============================================================================
# Transport Protocol
# =============================================================================


class UploadTransport(Protocol):
    """Network operations the upload manager depends on."""

    async def upload_chunk(
        self,
        *,
        file_id: str,
        chunk_index: int,
        total_chunks: int,
        chunk: bytes,
        file_name: str,
        mime_type: str,
    ) -> Any: ...

    async def finalize(self, file_id: str) -> Document: ...

    async def upload_document(
        self,
        source: FileSource,
        on_bytes: ByteProgressCallback | None = None,
    ) -> Document: ...


# =============================================================================
# Upload Progress Stream
# =============================================================================


class ProgressByteStream(httpx.AsyncByteStream):
    """Wrap a request body and report bytes as they are sent."""

    def __init__(
        self,
        stream: httpx.AsyncByteStream,
        total: int,
        callback: ByteProgressCallback | None,
    ) -> None:
        self._stream = stream
        self._total = total
        self._callback = callback

    async def __aiter__(self) -> AsyncIterator[bytes]:
        sent = 0
        async for part in self._stream:
            sent += len(part)
            yield part
            if self._callback:
                self._callback(sent, self._total)

    async def aclose(self) -> None:
        await self._stream.aclose()


# =============================================================================
# DocumentClient
# =============================================================================


@dataclass
class DocumentClient:
    """HTTP client for chunked and single-request document uploads."""

    base_url: str
    token: str | None = None
    timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS
    verify_ssl: bool = True
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)
    _client: httpx.AsyncClient | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate and normalize URL."""
        self.base_url = validate_server_url(self.base_url)

    # =========================================================================
    # Client Management
    # =========================================================================

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers=headers,
                transport=self.transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> DocumentClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    # =========================================================================
    # Request Plumbing
    # =========================================================================

    def _check_response(self, resp: httpx.Response, path: str) -> httpx.Response:
        """Raise a typed error for non-2xx responses.

        Raises:
            RateLimitedError: On 429.
            ServerValidationError: On 400/422.
            AuthenticationError: On 401.
            PermissionDeniedError: On 403.
            ResourceNotFoundError: On 404.
            UploadError: On any other error status.
        """
        status = resp.status_code
        if status < 400:
            return resp

        if status == 429:
            raise RateLimitedError(path, resp.headers.get("Retry-After"))
        if status in (400, 422):
            raise ServerValidationError(_error_message(resp), status, path)
        if status == 401:
            raise AuthenticationError(self.base_url, "Session expired or token invalid")
        if status == 403:
            raise PermissionDeniedError(path, "upload to")
        if status == 404:
            raise ResourceNotFoundError("resource", path)
        raise UploadError(
            f"HTTP {status}: {resp.text[:200]}",
            status_code=status,
            details={"path": path},
        )

    async def _send(self, request: httpx.Request) -> httpx.Response:
        """Send a prepared request, mapping transport failures.

        Raises:
            ServerUnreachableError: If the connection cannot be opened.
            NetworkError: On timeouts and other transport errors.
        """
        client = self._get_client()
        try:
            resp = await client.send(request)
        except httpx.ConnectError as e:
            raise ServerUnreachableError(self.base_url) from e
        except httpx.TimeoutException as e:
            raise NetworkError(self.base_url, f"Timeout after {self.timeout}s") from e
        except httpx.TransportError as e:
            raise NetworkError(self.base_url, str(e)) from e
        return self._check_response(resp, request.url.path)

    async def _post(self, path: str, **kwargs: Any) -> httpx.Response:
        request = self._get_client().build_request("POST", path, **kwargs)
        return await self._send(request)

    # =========================================================================
    # Upload Endpoints
    # =========================================================================

    async def upload_chunk(
        self,
        *,
        file_id: str,
        chunk_index: int,
        total_chunks: int,
        chunk: bytes,
        file_name: str,
        mime_type: str,
    ) -> dict[str, Any]:
        """Upload one chunk of a file.

        Returns:
            Server acknowledgement, e.g. ``{"success": true, "chunkIndex": 0}``.
        """
        resp = await self._post(
            CHUNK_PATH,
            data={
                "fileId": file_id,
                "chunkIndex": str(chunk_index),
                "totalChunks": str(total_chunks),
                "fileName": file_name,
                "mimeType": mime_type,
            },
            files={CHUNK_FIELD: (CHUNK_FILENAME, chunk, "application/octet-stream")},
        )
        return _json_or_empty(resp)

    async def finalize(self, file_id: str) -> Document:
        """Ask the server to assemble the uploaded chunks of ``file_id``."""
        resp = await self._post(FINALIZE_PATH.format(file_id=file_id))
        return _parse_document(resp, file_id)

    async def upload_document(
        self,
        source: FileSource,
        on_bytes: ByteProgressCallback | None = None,
    ) -> Document:
        """Upload a whole file in one multipart request.

        Args:
            source: File to upload.
            on_bytes: Called with ``(bytes_sent, total_bytes)`` as the request
                body is streamed.
        """
        content = await source.aread_all()
        request = self._get_client().build_request(
            "POST",
            DOCUMENTS_PATH,
            files={"file": (source.name, content, source.mime_type)},
        )
        total = int(request.headers.get("Content-Length", "0"))
        request.stream = ProgressByteStream(request.stream, total, on_bytes)
        resp = await self._send(request)
        return _parse_document(resp)


# =============================================================================
# Response Helpers
# =============================================================================


def _json_or_empty(resp: httpx.Response) -> dict[str, Any]:
    if not resp.content:
        return {}
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error_message(resp: httpx.Response) -> str:
    """Pull a readable message out of an error body."""
    data = _json_or_empty(resp)
    message = data.get("message")
    if isinstance(message, list):
        return "; ".join(str(m) for m in message)
    if message:
        return str(message)
    return f"HTTP {resp.status_code}: {resp.text[:200]}"


def _parse_document(resp: httpx.Response, file_id: str | None = None) -> Document:
    try:
        return Document.model_validate(resp.json())
    except (ValueError, pydantic.ValidationError) as e:
        raise UploadError(f"Invalid document in server response: {e}", file_id=file_id) from e
