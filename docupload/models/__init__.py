"""Data models for docupload.

Provides Pydantic models for server resources and upload progress tracking.
"""

from __future__ import annotations

from .base import BaseModel
from .document import Document
from .source import FileSource
from .progress import TERMINAL_STATUSES, UploadProgress, UploadStatus, UploadSummary

__all__ = [
    # Base
    "BaseModel",
    # Resources
    "Document",
    "FileSource",
    # Progress
    "TERMINAL_STATUSES",
    "UploadStatus",
    "UploadProgress",
    "UploadSummary",
]
