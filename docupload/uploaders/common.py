"""Common utilities for uploader modules."""

from __future__ import annotations

import asyncio
import logging
import random
import secrets
import time
from collections.abc import Awaitable, Callable
from typing import NamedTuple, TypeVar

from docupload.core.exceptions import RateLimitedError, RetryExhaustedError
from docupload.uploaders.constants import (
    CHUNK_SIZE,
    MAX_RETRIES,
    RETRY_BASE_DELAY,
    RETRY_JITTER,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]

_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


# =============================================================================
# Chunking
# =============================================================================


class ChunkRange(NamedTuple):
    """Byte range ``[start, end)`` of a file."""

    index: int
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start


def count_chunks(size: int, chunk_size: int = CHUNK_SIZE) -> int:
    """Return ``ceil(size / chunk_size)``.

    Raises:
        ValueError: If size is negative or chunk_size is not positive.
    """
    if size < 0:
        raise ValueError(f"File size cannot be negative: {size}")
    if chunk_size <= 0:
        raise ValueError(f"Chunk size must be positive: {chunk_size}")
    return -(-size // chunk_size)


def split_into_chunks(size: int, chunk_size: int = CHUNK_SIZE) -> list[ChunkRange]:
    """Partition ``size`` bytes into ordered, contiguous chunk ranges.

    Every chunk is ``chunk_size`` bytes except the last, which holds the
    remainder. A zero-length file yields no chunks.

    Args:
        size: Total file size in bytes.
        chunk_size: Maximum bytes per chunk.

    Returns:
        List of ChunkRange covering exactly ``[0, size)``.

    Raises:
        ValueError: If size is negative or chunk_size is not positive.
    """
    total = count_chunks(size, chunk_size)
    return [
        ChunkRange(i, i * chunk_size, min((i + 1) * chunk_size, size))
        for i in range(total)
    ]


def generate_file_id(file_index: int) -> str:
    """Generate a session-unique upload identifier.

    Format: ``<epoch-millis>-<file_index>-<6 random base36 chars>``.
    """
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(6))
    return f"{int(time.time() * 1000)}-{file_index}-{suffix}"


# =============================================================================
# Retry
# =============================================================================


def backoff_delay(
    attempt: int,
    *,
    base_delay: float = RETRY_BASE_DELAY,
    jitter: float = RETRY_JITTER,
) -> float:
    """Delay before retry number ``attempt`` (0-based).

    ``base_delay * 2**attempt`` plus up to ``jitter`` seconds of random
    jitter. With ``jitter <= base_delay`` each delay is strictly greater than
    the previous one.
    """
    return base_delay * (2**attempt) + random.random() * jitter


async def upload_with_retry(
    upload_fn: Callable[[], Awaitable[T]],
    *,
    max_retries: int = MAX_RETRIES,
    base_delay: float = RETRY_BASE_DELAY,
    jitter: float = RETRY_JITTER,
    label: str = "upload",
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """Await an upload coroutine, retrying when the server rate-limits.

    Only ``RateLimitedError`` is retried. Any other exception propagates on
    the first occurrence.

    Args:
        upload_fn: Zero-argument coroutine function performing one attempt.
                   Called again on retry - must be idempotent.
        max_retries: Maximum number of retries after the first attempt.
        base_delay: Base for exponential backoff in seconds.
        jitter: Upper bound of random jitter added to each delay.
        label: Label for log messages.
        sleep: Coroutine used to wait between attempts.

    Returns:
        The result of the first successful attempt.

    Raises:
        RetryExhaustedError: If every attempt was rate-limited.
    """
    last_exc: RateLimitedError | None = None

    for attempt in range(max_retries + 1):
        try:
            return await upload_fn()
        except RateLimitedError as e:
            last_exc = e
            if attempt < max_retries:
                delay = backoff_delay(attempt, base_delay=base_delay, jitter=jitter)
                logger.warning(
                    "%s: HTTP 429 on attempt %d/%d, retrying in %.2fs",
                    label,
                    attempt + 1,
                    max_retries + 1,
                    delay,
                )
                await sleep(delay)

    raise RetryExhaustedError(label, max_retries + 1, last_exc)
