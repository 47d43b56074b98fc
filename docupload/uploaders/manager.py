"""Upload orchestrator: chunked and single-request uploads of one file.

``UploadManager`` owns the task registry, the chunk limiter shared by every
file it uploads, and the list of progress observers. All of them are
mutated only from the event loop thread and never across an ``await``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial

from docupload.core.client import UploadTransport
from docupload.core.config import UploadSettings
from docupload.core.exceptions import UploadCancelledError
from docupload.core.logging import get_audit_logger, log_context
from docupload.core.validation import validate_file_name, validate_total_chunks
from docupload.models.document import Document
from docupload.models.progress import UploadProgress
from docupload.models.source import FileSource
from docupload.uploaders.common import (
    SleepFn,
    count_chunks,
    generate_file_id,
    split_into_chunks,
    upload_with_retry,
)
from docupload.uploaders.limiter import ChunkLimiter
from docupload.uploaders.task import UploadTask, percent

logger = logging.getLogger(__name__)

PercentCallback = Callable[[int], None]
ProgressCallback = Callable[[UploadProgress], None]


@dataclass(eq=False)
class _Observer:
    """One registration of a progress callback."""

    callback: ProgressCallback
    file_id: str | None = None

    def wants(self, event: UploadProgress) -> bool:
        return self.file_id is None or self.file_id == event.file_id


class UploadManager:
    """Drive file uploads end to end and expose pause/resume/cancel."""

    def __init__(
        self,
        transport: UploadTransport,
        settings: UploadSettings | None = None,
        *,
        limiter: ChunkLimiter | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        """Initialize the manager.

        Args:
            transport: Performs the network calls.
            settings: Chunk size, concurrency, delay and retry settings.
            limiter: Chunk limiter to share with other managers. A private one
                sized ``settings.max_concurrent_chunks`` is created otherwise.
            sleep: Coroutine used for every delay (inter-chunk, backoff).
        """
        self.transport = transport
        self.settings = (settings or UploadSettings()).validate()
        self.limiter = limiter or ChunkLimiter(self.settings.max_concurrent_chunks)
        self._sleep = sleep
        self._tasks: dict[str, UploadTask] = {}
        self._observers: list[_Observer] = []
        self._audit = get_audit_logger()

    # =========================================================================
    # Observers
    # =========================================================================

    def add_progress_callback(
        self,
        callback: ProgressCallback,
        file_id: str | None = None,
    ) -> Callable[[], None]:
        """Register a progress observer.

        Args:
            callback: Receives an UploadProgress for every progress change.
            file_id: Only deliver events of this upload. All uploads if None.

        Returns:
            A function removing exactly this registration.
        """
        observer = _Observer(callback, file_id)
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(
        self,
        task: UploadTask,
        on_progress: PercentCallback | None,
        event: UploadProgress | None = None,
    ) -> None:
        event = event or task.snapshot()
        if on_progress:
            try:
                on_progress(event.progress)
            except Exception:
                logger.exception("Progress callback failed for %s", task.file_id)

        for observer in list(self._observers):
            if not observer.wants(event):
                continue
            try:
                observer.callback(event)
            except Exception:
                logger.exception("Progress observer failed for %s", task.file_id)

    # =========================================================================
    # Upload
    # =========================================================================

    async def upload_file(
        self,
        source: FileSource,
        file_index: int = 0,
        on_progress: PercentCallback | None = None,
    ) -> Document:
        """Upload one file and return the stored document.

        Files larger than ``settings.chunk_threshold`` are sent chunk by
        chunk and finalized; the rest go out in a single request.

        Args:
            source: File to upload.
            file_index: Caller's index for this file, echoed in progress events.
            on_progress: Called with the new percentage on every change.

        Returns:
            The document assembled by the server.

        Raises:
            UploadCancelledError: If the upload was cancelled.
            DocUploadError: On any terminal failure; the task records it.
        """
        chunk_size = self.settings.chunk_size
        task = UploadTask(
            source=source,
            file_index=file_index,
            file_id=generate_file_id(file_index),
            chunk_size=chunk_size,
            total_chunks=count_chunks(source.size, chunk_size),
        )
        self._tasks[task.file_id] = task

        runner = asyncio.create_task(
            self._run(task, on_progress), name=f"upload-{task.file_id}"
        )
        task.token.bind(runner)

        with log_context(
            "upload",
            logger,
            file_id=task.file_id,
            name=source.name,
            size=source.size,
        ):
            try:
                document = await runner
            except asyncio.CancelledError:
                if not task.token.cancelled:
                    # The caller was cancelled, not the upload
                    task.cancel()
                    raise
                self._record_cancelled(task)
                raise UploadCancelledError(task.file_id) from None
            except UploadCancelledError:
                self._record_cancelled(task)
                raise
            except Exception as e:
                if task.token.cancelled:
                    self._record_cancelled(task)
                    raise UploadCancelledError(task.file_id) from e
                task.fail(str(e))
                self._audit.log_upload(
                    file_id=task.file_id,
                    file_name=source.name,
                    outcome="error",
                    details={"error": str(e)},
                )
                raise

        self._audit.log_upload(
            file_id=task.file_id,
            file_name=source.name,
            outcome="completed",
            document_id=document.id,
        )
        return document

    def _record_cancelled(self, task: UploadTask) -> None:
        task.cancel()
        self._audit.log_upload(
            file_id=task.file_id,
            file_name=task.source.name,
            outcome="cancelled",
        )

    async def _run(self, task: UploadTask, on_progress: PercentCallback | None) -> Document:
        validate_file_name(task.source.name)
        task.token.raise_if_cancelled(task.file_id)

        if task.source.size > self.settings.chunk_threshold:
            validate_total_chunks(task.total_chunks)
            return await self._upload_chunked(task, on_progress)
        return await self._upload_simple(task, on_progress)

    async def _upload_chunked(
        self,
        task: UploadTask,
        on_progress: PercentCallback | None,
    ) -> Document:
        source = task.source
        chunks = split_into_chunks(source.size, task.chunk_size)
        last_index = task.total_chunks - 1
        task.start()

        for chunk in chunks[task.uploaded_chunks:]:
            task.token.raise_if_cancelled(task.file_id)
            await task.wait_until_resumed()

            data = await source.aread_range(chunk.start, chunk.end)
            send = partial(
                self.transport.upload_chunk,
                file_id=task.file_id,
                chunk_index=chunk.index,
                total_chunks=task.total_chunks,
                chunk=data,
                file_name=source.name,
                mime_type=source.mime_type,
            )

            async with self.limiter:
                await upload_with_retry(
                    send,
                    max_retries=self.settings.max_retries,
                    base_delay=self.settings.retry_base_delay,
                    jitter=self.settings.retry_jitter,
                    label=f"{source.name} chunk {chunk.index + 1}/{task.total_chunks}",
                    sleep=self._sleep,
                )
                if chunk.index < last_index and self.settings.chunk_delay > 0:
                    await self._sleep(self.settings.chunk_delay)

            task.record_chunk(chunk.index)
            logger.debug(
                "%s: chunk %d/%d confirmed (%d%%)",
                task.file_id,
                chunk.index + 1,
                task.total_chunks,
                task.progress,
            )
            self._notify(task, on_progress)

        task.token.raise_if_cancelled(task.file_id)
        document = await self.transport.finalize(task.file_id)

        task.complete()
        self._notify(task, on_progress)
        return document

    async def _upload_simple(
        self,
        task: UploadTask,
        on_progress: PercentCallback | None,
    ) -> Document:
        task.start()
        size = task.source.size

        def on_bytes(sent: int, total: int) -> None:
            before = task.progress
            value = task.set_progress(percent(sent, total))
            if value != before:
                # Body bytes include multipart framing; report in file bytes.
                file_bytes = min(size, size * sent // total) if total > 0 else 0
                event = UploadProgress(
                    file_index=task.file_index,
                    progress=value,
                    uploaded_bytes=file_bytes,
                    total_bytes=size,
                    file_id=task.file_id,
                )
                self._notify(task, on_progress, event)

        document = await self.transport.upload_document(task.source, on_bytes)

        task.complete()
        self._notify(task, on_progress)
        return document

    # =========================================================================
    # Task Control
    # =========================================================================

    def pause(self, file_id: str) -> bool:
        """Stop starting new chunks for an uploading task.

        A chunk already in flight still finishes.
        """
        task = self._tasks.get(file_id)
        if task is None or not task.pause():
            return False
        logger.info("Paused upload %s at chunk %d", file_id, task.uploaded_chunks)
        return True

    def resume(self, file_id: str) -> bool:
        """Continue a paused task from its chunk cursor."""
        task = self._tasks.get(file_id)
        if task is None or not task.resume():
            return False
        logger.info("Resumed upload %s at chunk %d", file_id, task.uploaded_chunks)
        return True

    def cancel(self, file_id: str) -> bool:
        """Abort a task and drop it from the registry.

        Returns:
            True if the task was known.
        """
        task = self._tasks.pop(file_id, None)
        if task is None:
            return False
        task.cancel()
        logger.info("Cancelled upload %s", file_id)
        return True

    def clear(self) -> None:
        """Cancel every task and empty the registry."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            logger.info("Cleared %d upload(s)", len(tasks))

    def prune(self) -> int:
        """Drop completed, failed and cancelled tasks from the registry.

        Returns:
            Number of tasks removed.
        """
        finished = [file_id for file_id, task in self._tasks.items() if task.is_terminal]
        for file_id in finished:
            del self._tasks[file_id]
        return len(finished)

    def get_task(self, file_id: str) -> UploadTask | None:
        return self._tasks.get(file_id)

    def get_all_tasks(self) -> list[UploadTask]:
        return list(self._tasks.values())
