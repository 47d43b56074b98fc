"""Core modules for docupload."""

from docupload.core.client import DocumentClient, UploadTransport
from docupload.core.config import CONFIG_DIR, CONFIG_FILE, Config, Profile, UploadSettings
from docupload.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    DocUploadError,
    NetworkError,
    OperationError,
    QueueClearedError,
    RateLimitedError,
    ResourceNotFoundError,
    RetryExhaustedError,
    UploadCancelledError,
    UploadError,
    ValidationError,
)
from docupload.core.logging import LogContext, get_audit_logger, get_logger, setup_logging
from docupload.core.output import (
    OutputFormat,
    console,
    print_error,
    print_json,
    print_output,
    print_success,
    print_table,
    print_warning,
)
from docupload.core.validation import (
    validate_file_name,
    validate_server_url,
    validate_total_chunks,
    validate_workers,
)

__all__ = [
    # Exceptions
    "DocUploadError",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "NetworkError",
    "ResourceNotFoundError",
    "ValidationError",
    "OperationError",
    "UploadError",
    "RateLimitedError",
    "UploadCancelledError",
    "QueueClearedError",
    "RetryExhaustedError",
    # Validation
    "validate_server_url",
    "validate_file_name",
    "validate_total_chunks",
    "validate_workers",
    # Config
    "Config",
    "Profile",
    "UploadSettings",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Client
    "DocumentClient",
    "UploadTransport",
    # Output
    "OutputFormat",
    "print_output",
    "print_table",
    "print_json",
    "print_error",
    "print_warning",
    "print_success",
    "console",
    # Logging
    "get_logger",
    "get_audit_logger",
    "setup_logging",
    "LogContext",
]
