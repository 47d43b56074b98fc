"""Service layer for document server operations."""

from __future__ import annotations

from .uploads import UploadService, collect_sources

__all__ = [
    "UploadService",
    "collect_sources",
]
