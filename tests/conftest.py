"""Pytest configuration and fixtures for docupload tests."""

from __future__ import annotations

import asyncio
import tempfile
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, Generator

import pytest

from docupload.core.config import UploadSettings
from docupload.models.document import Document
from docupload.models.source import FileSource


def make_document(name: str = "file.bin", size: int = 0, doc_id: str = "doc-1") -> Document:
    return Document.model_validate(
        {
            "id": doc_id,
            "originalName": name,
            "mimeType": "application/octet-stream",
            "size": size,
            "filePath": f"uploads/{name}",
            "fileURL": f"https://files.example.org/{name}",
            "isPrivate": False,
            "createdAt": "2026-01-15T10:30:00Z",
            "userId": "user-1",
            "authorNickname": "tester",
        }
    )


class FakeTransport:
    """In-memory stand-in for the document server.

    Records every chunk attempt, assembles confirmed chunks on finalize and
    tracks how many chunk requests are in flight at once.
    """

    def __init__(self) -> None:
        self.chunk_calls: list[dict[str, Any]] = []
        self.received: dict[str, dict[int, bytes]] = {}
        self.names: dict[str, str] = {}
        self.finalized: list[str] = []
        self.simple_uploads: list[FileSource] = []
        self.failures: dict[int, list[BaseException]] = {}
        self.gate: asyncio.Event | None = None
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

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
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            self.chunk_calls.append(
                {
                    "file_id": file_id,
                    "chunk_index": chunk_index,
                    "total_chunks": total_chunks,
                    "size": len(chunk),
                    "file_name": file_name,
                    "mime_type": mime_type,
                }
            )
            for _ in range(3):
                await asyncio.sleep(0)
            if self.gate is not None:
                await self.gate.wait()

            pending = self.failures.get(chunk_index)
            if pending:
                raise pending.pop(0)

            self.received.setdefault(file_id, {})[chunk_index] = chunk
            self.names[file_id] = file_name
            return {"success": True, "chunkIndex": chunk_index}
        finally:
            self.in_flight -= 1

    async def finalize(self, file_id: str) -> Document:
        self.finalized.append(file_id)
        parts = self.received.get(file_id, {})
        data = b"".join(parts[i] for i in sorted(parts))
        return make_document(self.names.get(file_id, "file.bin"), len(data), f"doc-{file_id}")

    async def upload_document(self, source: FileSource, on_bytes=None) -> Document:
        self.simple_uploads.append(source)
        # Multipart framing makes the body larger than the file
        total = source.size + 200
        if on_bytes:
            for sent in (total // 2, total):
                on_bytes(sent, total)
                await asyncio.sleep(0)
        return make_document(source.name, source.size, f"doc-simple-{len(self.simple_uploads)}")

    def assembled(self, file_id: str) -> bytes:
        parts = self.received.get(file_id, {})
        return b"".join(parts[i] for i in sorted(parts))

    def chunk_indices(self, file_id: str | None = None) -> list[int]:
        return [
            call["chunk_index"]
            for call in self.chunk_calls
            if file_id is None or call["file_id"] == file_id
        ]

    async def aclose(self) -> None:
        self.closed = True


class RecordingSleep:
    """Replacement for ``asyncio.sleep`` that records delays and only yields."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sleep_spy() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fast_settings() -> UploadSettings:
    """Small chunks, no inter-chunk delay."""
    return UploadSettings(chunk_size=4, chunk_delay=0.0, max_concurrent_chunks=3)


@pytest.fixture
def make_source() -> Callable[..., FileSource]:
    def factory(name: str = "notes.txt", size: int = 10) -> FileSource:
        data = bytes(i % 251 for i in range(size))
        return FileSource.from_bytes(name, data)

    return factory


@pytest.fixture
def wait_until() -> Callable[..., Awaitable[None]]:
    """Yield to the event loop until a condition holds."""

    async def waiter(predicate: Callable[[], bool], max_ticks: int = 1000) -> None:
        for _ in range(max_ticks):
            if predicate():
                return
            await asyncio.sleep(0)
        raise AssertionError("condition not reached")

    return waiter


@pytest.fixture
def document_payload() -> dict[str, Any]:
    """Document JSON as returned by the server."""
    return {
        "id": "66b1f0c2a1",
        "originalName": "report.pdf",
        "mimeType": "application/pdf",
        "size": 5242880,
        "filePath": "uploads/2026/report.pdf",
        "fileURL": "https://files.example.org/report.pdf",
        "isPrivate": True,
        "createdAt": "2026-01-15T10:30:00Z",
        "userId": "user-42",
        "authorNickname": "alice",
    }


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: test
output_format: table

profiles:
  test:
    url: https://docs-test.example.org/api
    verify_ssl: false
    timeout: 30
    upload:
      chunk_size: 1048576
      max_concurrent_chunks: 6
      max_concurrent_files: 2

  production:
    url: https://docs.example.org/api
    verify_ssl: true
    timeout: 60
"""
