"""File sources: the bytes behind an upload."""

from __future__ import annotations

import asyncio
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_MIME_TYPE = "application/octet-stream"


def guess_mime_type(name: str) -> str:
    """Guess a MIME type from a file name."""
    mime_type, _ = mimetypes.guess_type(name)
    return mime_type or DEFAULT_MIME_TYPE


@dataclass(frozen=True)
class FileSource:
    """A file to upload, read either from disk or from memory.

    Exactly one of ``path`` or ``data`` is set.
    """

    name: str
    size: int
    mime_type: str = DEFAULT_MIME_TYPE
    path: Path | None = None
    data: bytes | None = field(default=None, repr=False)

    @classmethod
    def from_path(cls, path: Path, mime_type: str | None = None) -> "FileSource":
        """Create a source backed by a file on disk.

        Raises:
            ValueError: If path is not a regular file.
        """
        path = Path(path).expanduser()
        if not path.is_file():
            raise ValueError(f"Not a file: {path}")
        return cls(
            name=path.name,
            size=path.stat().st_size,
            mime_type=mime_type or guess_mime_type(path.name),
            path=path,
        )

    @classmethod
    def from_bytes(cls, name: str, data: bytes, mime_type: str | None = None) -> "FileSource":
        """Create a source backed by an in-memory buffer."""
        return cls(
            name=name,
            size=len(data),
            mime_type=mime_type or guess_mime_type(name),
            data=bytes(data),
        )

    def read_range(self, start: int, end: int) -> bytes:
        """Read bytes ``[start, end)``."""
        if start < 0 or end < start or end > self.size:
            raise ValueError(f"Invalid range [{start}, {end}) for {self.size} bytes")
        if self.data is not None:
            return self.data[start:end]
        assert self.path is not None
        with self.path.open("rb") as f:
            f.seek(start)
            return f.read(end - start)

    def read_all(self) -> bytes:
        """Read the whole file."""
        return self.read_range(0, self.size)

    async def aread_range(self, start: int, end: int) -> bytes:
        """Read bytes ``[start, end)`` without blocking the event loop."""
        if self.data is not None:
            return self.read_range(start, end)
        return await asyncio.to_thread(self.read_range, start, end)

    async def aread_all(self) -> bytes:
        return await self.aread_range(0, self.size)
