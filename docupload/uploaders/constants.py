"""Shared constants for uploader modules.

Defaults mirror the server's tolerance for bursty clients. For fast links to
a server without rate limiting, consider raising the chunk and file
concurrency via CLI flags (e.g., --chunks 6 --files 3).
"""

from docupload.core.config import (
    DEFAULT_CHUNK_DELAY,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CHUNK_THRESHOLD,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_MAX_CONCURRENT_CHUNKS,
    DEFAULT_MAX_CONCURRENT_FILES,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_BASE_DELAY,
    DEFAULT_RETRY_JITTER,
)
from docupload.core.validation import MAX_NAME_LENGTH, MAX_TOTAL_CHUNKS

# =============================================================================
# Chunking
# =============================================================================

# Bytes per chunk (2 MiB)
CHUNK_SIZE = DEFAULT_CHUNK_SIZE

# Files at or below this size go out in a single request
CHUNK_THRESHOLD = DEFAULT_CHUNK_THRESHOLD

# =============================================================================
# Concurrency
# =============================================================================

# Chunk transfers in flight across all files of one manager
MAX_CONCURRENT_CHUNKS = DEFAULT_MAX_CONCURRENT_CHUNKS

# Whole-file orchestrations in flight per queue
MAX_CONCURRENT_FILES = DEFAULT_MAX_CONCURRENT_FILES

# Pause between consecutive chunks of one file (seconds)
CHUNK_DELAY = DEFAULT_CHUNK_DELAY

# =============================================================================
# Retry
# =============================================================================

MAX_RETRIES = DEFAULT_MAX_RETRIES
RETRY_BASE_DELAY = DEFAULT_RETRY_BASE_DELAY
RETRY_JITTER = DEFAULT_RETRY_JITTER

# HTTP timeout for upload requests
DEFAULT_TIMEOUT = DEFAULT_HTTP_TIMEOUT_SECONDS

__all__ = [
    "CHUNK_SIZE",
    "CHUNK_THRESHOLD",
    "MAX_CONCURRENT_CHUNKS",
    "MAX_CONCURRENT_FILES",
    "CHUNK_DELAY",
    "MAX_RETRIES",
    "RETRY_BASE_DELAY",
    "RETRY_JITTER",
    "DEFAULT_TIMEOUT",
    "MAX_NAME_LENGTH",
    "MAX_TOTAL_CHUNKS",
]
