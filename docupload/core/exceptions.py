"""Exceptions raised by docupload.

Every error carries a ``details`` mapping that is appended to its message, so
the CLI can print any of them as one line.
"""

from __future__ import annotations

from typing import Any


class DocUploadError(Exception):
    """Root of the docupload error hierarchy."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


def _field_details(field: str | None, value: Any) -> dict[str, Any]:
    details: dict[str, Any] = {}
    if field:
        details["field"] = field
    if value is not None:
        details["value"] = repr(value)
    return details


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(DocUploadError):
    """The config file or upload settings cannot be used."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        super().__init__(message, _field_details(field, value))
        self.field = field
        self.value = value


class ProfileNotFoundError(ConfigurationError):
    """No profile with the given name in the config file."""

    def __init__(self, profile: str):
        super().__init__(f"Profile not found: {profile}", field="profile", value=profile)
        self.profile = profile


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(DocUploadError):
    """A value was rejected before any request was sent."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        super().__init__(message, _field_details(field, value))
        self.field = field
        self.value = value


class InvalidURLError(ValidationError):
    """Server URL is not an absolute http(s) URL."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Invalid URL: {url}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="url", value=url)
        self.url = url
        self.reason = reason


class ServerValidationError(ValidationError):
    """The server rejected a request as malformed (HTTP 400/422)."""

    def __init__(self, message: str, status_code: int, path: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.path = path
        self.details["status_code"] = status_code
        if path:
            self.details["path"] = path


# =============================================================================
# Connection Errors
# =============================================================================


class ConnectionError(DocUploadError):
    """The server could not be talked to."""

    def __init__(self, message: str, url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message, details)
        self.url = url


class NetworkError(ConnectionError):
    """The request failed in transit, typically a timeout."""

    def __init__(self, url: str, cause: str | None = None):
        msg = f"Network error connecting to {url}"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__(msg, url)
        self.cause = cause


class ServerUnreachableError(ConnectionError):
    """Connection to the server was refused or could not be opened."""

    def __init__(self, url: str):
        super().__init__(f"Server unreachable: {url}", url)


class RetryExhaustedError(ConnectionError):
    """A rate-limited request was still rejected after the last retry."""

    def __init__(self, operation: str, attempts: int, last_error: Exception | None = None):
        msg = f"Operation '{operation}' failed after {attempts} attempts"
        if last_error:
            msg = f"{msg}: {last_error}"
        super().__init__(msg)
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationError(DocUploadError):
    """The server refused the bearer token (HTTP 401)."""

    def __init__(self, url: str | None = None, reason: str = ""):
        msg = "Authentication failed"
        if url:
            msg = f"{msg} for {url}"
        if reason:
            msg = f"{msg}: {reason}"
        details = {"url": url} if url else {}
        super().__init__(msg, details)
        self.url = url
        self.reason = reason


class PermissionDeniedError(AuthenticationError):
    """The token is valid but may not upload here (HTTP 403)."""

    def __init__(self, resource: str, operation: str = "access"):
        super().__init__(reason=f"Permission denied to {operation} {resource}")
        self.resource = resource
        self.operation = operation


# =============================================================================
# Resource Errors
# =============================================================================


class ResourceNotFoundError(DocUploadError):
    """The addressed upload or endpoint is unknown to the server (HTTP 404)."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            {"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(DocUploadError):
    """An operation stopped before producing a result."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        full_details = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.operation = operation


class UploadError(OperationError):
    """The server rejected an upload request."""

    def __init__(
        self,
        message: str,
        file_id: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        full_details = details or {}
        if file_id:
            full_details["file_id"] = file_id
        if status_code is not None:
            full_details["status_code"] = status_code
        super().__init__("upload", message, full_details)
        self.file_id = file_id
        self.status_code = status_code


class RateLimitedError(UploadError):
    """Server asked the client to slow down (HTTP 429)."""

    def __init__(self, path: str, retry_after: str | None = None):
        details = {"path": path}
        if retry_after:
            details["retry_after"] = retry_after
        super().__init__("Rate limited by server", status_code=429, details=details)
        self.path = path
        self.retry_after = retry_after


class UploadCancelledError(OperationError):
    """Upload was cancelled by the caller.

    Not an ``UploadError``: ``except UploadError`` does not catch it.
    """

    def __init__(self, file_id: str | None = None):
        details = {"file_id": file_id} if file_id else {}
        super().__init__("upload", "Upload cancelled", details)
        self.file_id = file_id


class QueueClearedError(UploadError):
    """A queued upload was dropped before it started."""

    def __init__(self, file_name: str | None = None):
        details = {"file": file_name} if file_name else {}
        super().__init__("Upload queue cleared", details=details)
        self.file_name = file_name
