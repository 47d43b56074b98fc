"""Logging setup, timed operation contexts and the upload audit trail."""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Generator, Optional

from docupload.core.exceptions import UploadCancelledError

# =============================================================================
# Constants
# =============================================================================

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
AUDIT_LOGGER_NAME = "docupload.audit"


# =============================================================================
# Logger Setup
# =============================================================================


def setup_logging(
    level: int = logging.WARNING,
    *,
    quiet: bool = False,
    verbose: bool = False,
) -> None:
    """Send log records to stderr at ``level``.

    ``quiet`` lowers output to errors only and takes precedence over
    ``verbose``, which enables debug records.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stderr,
    )

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (typically ``get_logger(__name__)``)."""
    return logging.getLogger(name)


# =============================================================================
# Log Context
# =============================================================================


class LogContext:
    """Context manager timing an operation and logging its outcome."""

    def __init__(
        self,
        operation: str,
        logger: Optional[logging.Logger] = None,
        **context: Any,
    ):
        self.operation = operation
        self.logger = logger or get_logger(__name__)
        self.context = context
        self.start_time: Optional[datetime] = None

    @property
    def elapsed(self) -> float:
        """Seconds since the context was entered."""
        if self.start_time is None:
            return 0.0
        return (datetime.now() - self.start_time).total_seconds()

    def _context_str(self) -> str:
        return ", ".join(f"{k}={v}" for k, v in self.context.items())

    def __enter__(self) -> "LogContext":
        self.start_time = datetime.now()
        self.logger.info("Starting %s (%s)", self.operation, self._context_str())
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        duration = self.elapsed

        if exc_type is None:
            self.logger.info("%s completed in %.2fs", self.operation, duration)
        elif issubclass(exc_type, (UploadCancelledError, asyncio.CancelledError)):
            self.logger.info("%s cancelled after %.2fs", self.operation, duration)
        else:
            self.logger.error(
                "%s failed after %.2fs: %s",
                self.operation,
                duration,
                exc_val,
            )


@contextmanager
def log_context(
    operation: str,
    logger: Optional[logging.Logger] = None,
    **context: Any,
) -> Generator[LogContext, None, None]:
    """Time ``operation`` and log start, completion, cancellation or failure.

    Extra keyword arguments are rendered as ``key=value`` pairs in the start
    message.
    """
    ctx = LogContext(operation, logger, **context)
    with ctx:
        yield ctx


# =============================================================================
# Audit Logger
# =============================================================================


class AuditLogger:
    """Logger for the audit trail of finished uploads."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def log_upload(
        self,
        *,
        file_id: str,
        file_name: str,
        outcome: str,
        document_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        """Log the final outcome of one file upload.

        Args:
            file_id: Client-generated upload identifier.
            file_name: Name of the uploaded file.
            outcome: One of "completed", "error", "cancelled".
            document_id: Server document ID, when the upload completed.
            details: Additional details.
        """
        audit_record: dict[str, Any] = {
            "timestamp": datetime.now().isoformat(),
            "operation": "upload",
            "file_id": file_id,
            "file_name": file_name,
            "outcome": outcome,
        }

        if document_id:
            audit_record["document_id"] = document_id
        if details:
            audit_record["details"] = details

        level = logging.WARNING if outcome == "error" else logging.INFO
        self.logger.log(level, "AUDIT: %s", audit_record)


def get_audit_logger() -> AuditLogger:
    """Get the audit logger instance."""
    return AuditLogger()
