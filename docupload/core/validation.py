"""Input validation helpers for docupload."""

from __future__ import annotations

from urllib.parse import urlparse

from docupload.core.exceptions import InvalidURLError, ValidationError

MAX_NAME_LENGTH = 255
MAX_TOTAL_CHUNKS = 1000


def validate_server_url(url: str) -> str:
    """Validate and normalize a server URL.

    Args:
        url: URL to validate.

    Returns:
        URL without trailing slash.

    Raises:
        InvalidURLError: If the URL has no http(s) scheme or host.
    """
    if not url or not url.strip():
        raise InvalidURLError(url, "URL is empty")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise InvalidURLError(url, "scheme must be http or https")
    if not parsed.netloc:
        raise InvalidURLError(url, "missing host")

    return url.rstrip("/")


def validate_file_name(name: str) -> str:
    """Validate a file name sent alongside chunks (1-255 characters)."""
    if not name:
        raise ValidationError("File name is required", field="file_name")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"File name too long ({len(name)} > {MAX_NAME_LENGTH} characters)",
            field="file_name",
            value=name,
        )
    return name


def validate_total_chunks(total_chunks: int) -> int:
    """Validate a chunk count against the server limits (1-1000)."""
    if total_chunks < 1 or total_chunks > MAX_TOTAL_CHUNKS:
        raise ValidationError(
            f"Total chunks must be between 1 and {MAX_TOTAL_CHUNKS}, got {total_chunks}",
            field="total_chunks",
            value=total_chunks,
        )
    return total_chunks


def validate_workers(workers: int, *, field: str = "workers") -> int:
    """Validate a concurrency limit (must be >= 1)."""
    if workers < 1:
        raise ValidationError(f"{field} must be at least 1, got {workers}", field=field)
    return workers
