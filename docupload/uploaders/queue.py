"""FIFO queue capping how many files upload at once."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from functools import partial

from docupload.core.exceptions import QueueClearedError, UploadCancelledError
from docupload.core.validation import validate_workers
from docupload.models.document import Document
from docupload.models.source import FileSource
from docupload.uploaders.manager import PercentCallback, UploadManager

logger = logging.getLogger(__name__)


@dataclass
class QueuedUpload:
    """A file waiting for (or holding) a queue slot."""

    source: FileSource
    file_index: int
    on_progress: PercentCallback | None
    future: asyncio.Future[Document] = field(repr=False)

    @property
    def key(self) -> str:
        return f"{self.file_index}-{self.source.name}"


class UploadQueue:
    """Admit at most ``max_concurrent`` file uploads, the rest wait in order.

    Example:
        >>> queue = UploadQueue(manager, max_concurrent=2)
        >>> futures = [queue.enqueue(src, i) for i, src in enumerate(sources)]
        >>> documents = await asyncio.gather(*futures)
    """

    def __init__(self, manager: UploadManager, max_concurrent: int = 3) -> None:
        self.manager = manager
        self.max_concurrent = validate_workers(max_concurrent, field="max_concurrent")
        self._backlog: deque[QueuedUpload] = deque()
        self._active: dict[asyncio.Task[Document], QueuedUpload] = {}

    @property
    def active_count(self) -> int:
        """Number of uploads currently running."""
        return len(self._active)

    @property
    def queue_length(self) -> int:
        """Number of uploads waiting for a slot."""
        return len(self._backlog)

    def enqueue(
        self,
        source: FileSource,
        file_index: int = 0,
        on_progress: PercentCallback | None = None,
    ) -> asyncio.Future[Document]:
        """Submit a file for upload.

        Admission happens before this returns, so ``active_count`` and
        ``queue_length`` already reflect the new entry. Must be called from
        a running event loop.

        Returns:
            Future resolving to the stored document, or failing with the
            upload's error, ``UploadCancelledError`` or ``QueueClearedError``.
        """
        loop = asyncio.get_running_loop()
        entry = QueuedUpload(source, file_index, on_progress, loop.create_future())
        self._backlog.append(entry)
        logger.debug("Queued %s (%d waiting)", entry.key, len(self._backlog))
        self._process_queue()
        return entry.future

    def _process_queue(self) -> None:
        while self._backlog and len(self._active) < self.max_concurrent:
            entry = self._backlog.popleft()
            if entry.future.done():
                # Caller gave up on it while it waited
                continue
            task = asyncio.create_task(
                self.manager.upload_file(entry.source, entry.file_index, entry.on_progress),
                name=f"queued-upload-{entry.key}",
            )
            self._active[task] = entry
            task.add_done_callback(partial(self._on_settled, entry))
            logger.debug("Started %s (%d active)", entry.key, len(self._active))

    def _on_settled(self, entry: QueuedUpload, task: asyncio.Task[Document]) -> None:
        self._active.pop(task, None)

        if task.cancelled():
            error: BaseException | None = UploadCancelledError()
        else:
            error = task.exception()

        if not entry.future.done():
            if error is not None:
                entry.future.set_exception(error)
            else:
                entry.future.set_result(task.result())

        self._process_queue()

    # =========================================================================
    # Control
    # =========================================================================

    def pause(self, file_id: str) -> bool:
        return self.manager.pause(file_id)

    def resume(self, file_id: str) -> bool:
        return self.manager.resume(file_id)

    def cancel(self, file_id: str) -> bool:
        return self.manager.cancel(file_id)

    def clear(self) -> None:
        """Reject every waiting entry and cancel everything running."""
        waiting = list(self._backlog)
        self._backlog.clear()
        for entry in waiting:
            if not entry.future.done():
                entry.future.set_exception(QueueClearedError(entry.source.name))

        running = list(self._active)
        self._active.clear()
        self.manager.clear()
        # Covers tasks admitted but not yet registered with the manager
        for task in running:
            task.cancel()
        logger.info("Upload queue cleared (%d waiting dropped)", len(waiting))
