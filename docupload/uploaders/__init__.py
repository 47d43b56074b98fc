"""Upload engine for docupload.

This module provides the pieces behind a document upload:
- Chunk planning and rate-limit retry helpers
- A FIFO-fair limiter bounding chunk transfers
- The upload manager (per-file orchestration, pause/resume/cancel)
- The upload queue (bounded number of files in flight)

Use `UploadService` from `docupload.services.uploads` for path-based uploads.
"""

from docupload.uploaders.common import (
    ChunkRange,
    backoff_delay,
    count_chunks,
    generate_file_id,
    split_into_chunks,
    upload_with_retry,
)
from docupload.uploaders.constants import (
    CHUNK_DELAY,
    CHUNK_SIZE,
    CHUNK_THRESHOLD,
    DEFAULT_TIMEOUT,
    MAX_CONCURRENT_CHUNKS,
    MAX_CONCURRENT_FILES,
    MAX_RETRIES,
    RETRY_BASE_DELAY,
    RETRY_JITTER,
)
from docupload.uploaders.limiter import ChunkLimiter
from docupload.uploaders.manager import UploadManager
from docupload.uploaders.queue import QueuedUpload, UploadQueue
from docupload.uploaders.task import CancellationToken, UploadTask

__all__ = [
    # Constants
    "CHUNK_DELAY",
    "CHUNK_SIZE",
    "CHUNK_THRESHOLD",
    "DEFAULT_TIMEOUT",
    "MAX_CONCURRENT_CHUNKS",
    "MAX_CONCURRENT_FILES",
    "MAX_RETRIES",
    "RETRY_BASE_DELAY",
    "RETRY_JITTER",
    # Common utilities
    "ChunkRange",
    "backoff_delay",
    "count_chunks",
    "generate_file_id",
    "split_into_chunks",
    "upload_with_retry",
    # Engine
    "CancellationToken",
    "ChunkLimiter",
    "QueuedUpload",
    "UploadManager",
    "UploadQueue",
    "UploadTask",
]
