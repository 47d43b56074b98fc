"""Progress models for tracking upload status.

Provides the task status enum, broadcast progress events and the summary
returned for a batch of uploads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from .document import Document


class UploadStatus(Enum):
    """Lifecycle states of a single file upload."""

    PENDING = "pending"
    UPLOADING = "uploading"
    PAUSED = "paused"
    COMPLETED = "completed"
    ERROR = "error"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Check if no further transitions are possible."""
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {UploadStatus.COMPLETED, UploadStatus.ERROR, UploadStatus.CANCELLED}
)


@dataclass(frozen=True)
class UploadProgress:
    """Progress event broadcast to observers."""

    file_index: int
    progress: int
    uploaded_bytes: int
    total_bytes: int
    file_id: str = ""

    @property
    def is_complete(self) -> bool:
        """Check if the file reached 100%."""
        return self.progress >= 100

    @property
    def mb_sent(self) -> float:
        """Return megabytes sent."""
        return self.uploaded_bytes / (1024 * 1024)

    @property
    def total_mb(self) -> float:
        """Return total megabytes."""
        return self.total_bytes / (1024 * 1024)


@dataclass
class UploadSummary:
    """Summary of a batch of file uploads."""

    total: int
    duration: float = 0.0
    total_bytes: int = 0
    documents: List[Document] = field(default_factory=list)
    cancelled: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.documents)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def success(self) -> bool:
        return self.failed == 0 and self.cancelled == 0

    @property
    def success_rate(self) -> float:
        """Calculate success rate percentage."""
        if self.total == 0:
            return 100.0
        return (self.succeeded / self.total) * 100

    @property
    def throughput_mbps(self) -> float:
        """Calculate upload throughput in MB/s."""
        if self.duration == 0:
            return 0.0
        return self.total_bytes / (1024 * 1024) / self.duration
