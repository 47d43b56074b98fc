"""docupload - resumable chunked document uploads.

This package provides a client and a command-line interface for uploading
documents to a document server:
- Chunked uploads with bounded concurrency and rate-limit retry
- Pause, resume and cancel of individual uploads
- A FIFO queue capping how many files upload at once
"""

__version__ = "0.1.0"

from docupload.core.client import DocumentClient
from docupload.core.config import Config, Profile, UploadSettings
from docupload.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    DocUploadError,
    NetworkError,
    QueueClearedError,
    RateLimitedError,
    ResourceNotFoundError,
    UploadCancelledError,
    UploadError,
    ValidationError,
)
from docupload.models.source import FileSource
from docupload.uploaders.manager import UploadManager
from docupload.uploaders.queue import UploadQueue

__all__ = [
    "__version__",
    "DocumentClient",
    "Config",
    "Profile",
    "UploadSettings",
    "FileSource",
    "UploadManager",
    "UploadQueue",
    "DocUploadError",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "NetworkError",
    "QueueClearedError",
    "RateLimitedError",
    "ResourceNotFoundError",
    "UploadCancelledError",
    "UploadError",
    "ValidationError",
]
