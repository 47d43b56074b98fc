"""Per-file upload state: status machine, progress and chunk cursor."""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass, field

from docupload.core.exceptions import UploadCancelledError
from docupload.models.progress import UploadProgress, UploadStatus
from docupload.models.source import FileSource


def percent(done: int, total: int) -> int:
    """Integer percentage, rounding halves up."""
    if total <= 0:
        return 0
    return min(100, math.floor(done * 100 / total + 0.5))


class CancellationToken:
    """Revocable signal shared by all work belonging to one upload.

    Bound asyncio tasks are cancelled when the token fires, which aborts
    whatever they are awaiting (including in-flight HTTP requests).
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def bind(self, task: asyncio.Task) -> None:
        """Cancel ``task`` when this token fires."""
        if self._cancelled:
            task.cancel()
            return
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def cancel(self) -> bool:
        """Fire the token.

        Returns:
            True if this call fired it, False if it had already fired.
        """
        if self._cancelled:
            return False
        self._cancelled = True
        for task in list(self._tasks):
            task.cancel()
        return True

    def raise_if_cancelled(self, file_id: str | None = None) -> None:
        """Raise UploadCancelledError if the token has fired."""
        if self._cancelled:
            raise UploadCancelledError(file_id)


@dataclass
class UploadTask:
    """Mutable state of one file upload.

    Transitions: pending -> uploading <-> paused -> completed, and any
    non-terminal state -> error | cancelled. Transition methods return False
    instead of raising when the move is not allowed.
    """

    source: FileSource
    file_index: int
    file_id: str
    chunk_size: int
    total_chunks: int
    status: UploadStatus = UploadStatus.PENDING
    progress: int = 0
    uploaded_chunks: int = 0
    error: str | None = None
    token: CancellationToken = field(default_factory=CancellationToken, repr=False)
    _resumed: asyncio.Event = field(default_factory=asyncio.Event, init=False, repr=False)

    def __post_init__(self) -> None:
        self._resumed.set()

    # =========================================================================
    # Derived State
    # =========================================================================

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def total_bytes(self) -> int:
        return self.source.size

    @property
    def uploaded_bytes(self) -> int:
        """Bytes confirmed by the server so far."""
        if self.status == UploadStatus.COMPLETED:
            return self.source.size
        return min(self.uploaded_chunks * self.chunk_size, self.source.size)

    def snapshot(self) -> UploadProgress:
        """Build a progress event from the current state."""
        return UploadProgress(
            file_index=self.file_index,
            progress=self.progress,
            uploaded_bytes=self.uploaded_bytes,
            total_bytes=self.total_bytes,
            file_id=self.file_id,
        )

    # =========================================================================
    # Transitions
    # =========================================================================

    def start(self) -> bool:
        """pending -> uploading."""
        if self.status != UploadStatus.PENDING:
            return False
        self.status = UploadStatus.UPLOADING
        return True

    def pause(self) -> bool:
        """uploading -> paused."""
        if self.status != UploadStatus.UPLOADING:
            return False
        self.status = UploadStatus.PAUSED
        self._resumed.clear()
        return True

    def resume(self) -> bool:
        """paused -> uploading."""
        if self.status != UploadStatus.PAUSED:
            return False
        self.status = UploadStatus.UPLOADING
        self._resumed.set()
        return True

    def complete(self) -> bool:
        """Mark the upload finished; progress becomes 100."""
        if self.is_terminal:
            return False
        self.status = UploadStatus.COMPLETED
        self.uploaded_chunks = self.total_chunks
        self.progress = 100
        self._resumed.set()
        return True

    def fail(self, message: str) -> bool:
        """Record a terminal failure."""
        if self.is_terminal:
            return False
        self.status = UploadStatus.ERROR
        self.error = message
        self._resumed.set()
        return True

    def cancel(self) -> bool:
        """Fire the cancellation token and mark the task cancelled.

        The token fires even when the task is already terminal; the status
        only changes for non-terminal tasks.
        """
        self.token.cancel()
        if self.is_terminal:
            return False
        self.status = UploadStatus.CANCELLED
        self._resumed.set()
        return True

    # =========================================================================
    # Progress
    # =========================================================================

    def record_chunk(self, chunk_index: int) -> int:
        """Mark chunks up to ``chunk_index`` as confirmed.

        Returns:
            The new progress percentage.
        """
        self.uploaded_chunks = min(max(self.uploaded_chunks, chunk_index + 1), self.total_chunks)
        return self.set_progress(percent(self.uploaded_chunks, self.total_chunks))

    def set_progress(self, value: int) -> int:
        """Raise progress to ``value``; never lowers it.

        Stays below 100 until the task completes.
        """
        if self.status != UploadStatus.COMPLETED:
            value = min(value, 99)
        self.progress = max(self.progress, value)
        return self.progress

    async def wait_until_resumed(self) -> None:
        """Suspend while the task is paused."""
        while self.status == UploadStatus.PAUSED:
            await self._resumed.wait()
        self.token.raise_if_cancelled(self.file_id)
