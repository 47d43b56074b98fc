"""Upload service for document upload operations.

Provides UploadService, which turns a list of local paths into stored
documents through the upload queue and manager.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from docupload.core.client import DocumentClient
from docupload.core.config import UploadSettings
from docupload.core.exceptions import QueueClearedError, UploadCancelledError, ValidationError
from docupload.models.document import Document
from docupload.models.progress import UploadProgress, UploadSummary
from docupload.models.source import FileSource
from docupload.uploaders.common import SleepFn
from docupload.uploaders.manager import UploadManager
from docupload.uploaders.queue import UploadQueue

logger = logging.getLogger(__name__)


def collect_sources(paths: Sequence[Path]) -> list[FileSource]:
    """Build file sources for local paths, in order.

    Raises:
        ValidationError: If a path is not a regular file.
    """
    sources = []
    for path in paths:
        try:
            sources.append(FileSource.from_path(Path(path)))
        except (OSError, ValueError) as e:
            raise ValidationError(str(e), field="paths", value=str(path)) from e
    return sources


class UploadService:
    """Service for uploading local files as documents."""

    def __init__(
        self,
        client: DocumentClient,
        settings: UploadSettings | None = None,
        *,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        """Initialize service.

        Args:
            client: Document server client; closed with the service.
            settings: Upload tuning. ``max_concurrent_files`` caps the queue.
            sleep: Coroutine used for inter-chunk and backoff delays.
        """
        self.client = client
        self.settings = (settings or UploadSettings()).validate()
        self.manager = UploadManager(client, self.settings, sleep=sleep)
        self.queue = UploadQueue(self.manager, self.settings.max_concurrent_files)

    async def __aenter__(self) -> UploadService:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self.queue.clear()
        await self.client.aclose()

    async def upload_paths(
        self,
        paths: Sequence[Path],
        progress_callback: Callable[[UploadProgress], None] | None = None,
    ) -> UploadSummary:
        """Upload files and wait for every one of them to settle.

        Files are submitted in order; the queue decides how many run at once.
        Failures are collected, not raised.

        Args:
            paths: Files to upload.
            progress_callback: Receives every progress event of these uploads.

        Returns:
            UploadSummary with the stored documents and per-file errors.

        Raises:
            ValidationError: If a path is not a regular file. Nothing is
                uploaded in that case.
        """
        sources = collect_sources(paths)
        summary = UploadSummary(total=len(sources))
        if not sources:
            return summary

        unsubscribe = (
            self.manager.add_progress_callback(progress_callback) if progress_callback else None
        )
        start = time.monotonic()
        try:
            futures = [self.queue.enqueue(source, index) for index, source in enumerate(sources)]
            results = await asyncio.gather(*futures, return_exceptions=True)
        except asyncio.CancelledError:
            self.queue.clear()
            raise
        finally:
            if unsubscribe:
                unsubscribe()

        summary.duration = time.monotonic() - start
        for source, result in zip(sources, results):
            if isinstance(result, Document):
                summary.documents.append(result)
                summary.total_bytes += source.size
            elif isinstance(result, (UploadCancelledError, QueueClearedError)):
                summary.cancelled += 1
            elif isinstance(result, Exception):
                logger.error("Upload of %s failed: %s", source.name, result)
                summary.errors.append(f"{source.name}: {result}")
            else:
                raise result

        logger.info(
            "Uploaded %d/%d file(s) in %.1fs",
            summary.succeeded,
            summary.total,
            summary.duration,
        )
        return summary

    def cancel_all(self) -> None:
        """Drop waiting files and cancel running ones."""
        self.queue.clear()
