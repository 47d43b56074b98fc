"""Common CLI utilities, decorators, and helpers."""

from __future__ import annotations

import sys
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

import click

from docupload.core.client import DocumentClient
from docupload.core.config import Config, Profile, get_token
from docupload.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    DocUploadError,
    PermissionDeniedError,
    ProfileNotFoundError,
    UploadCancelledError,
)
from docupload.core.logging import setup_logging
from docupload.core.output import OutputFormat, print_error

F = TypeVar("F", bound=Callable[..., Any])


# =============================================================================
# Exit Codes
# =============================================================================


class ExitCode:
    """Standard exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 2
    NETWORK_ERROR = 3
    PERMISSION_ERROR = 4
    USER_CANCELLED = 5


# =============================================================================
# Context Object
# =============================================================================


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[Config] = None
        self.profile_name: Optional[str] = None
        self.output_format: OutputFormat = OutputFormat.TABLE
        self.quiet: bool = False
        self.verbose: bool = False

    def get_profile(self) -> Profile:
        """Resolve the active profile.

        Raises:
            ConfigurationError: If the profile is not configured.
        """
        if self.config is None:
            self.config = Config.load()

        try:
            return self.config.get_profile(self.profile_name)
        except ProfileNotFoundError as e:
            raise ConfigurationError(
                f"Profile '{self.profile_name or self.config.default_profile}' not found. "
                "Run 'docupload config init' to create one."
            ) from e

    def get_client(self) -> DocumentClient:
        """Create a client for the active profile.

        The bearer token comes from ``DOCUPLOAD_TOKEN``; it is never stored
        in the config file.
        """
        profile = self.get_profile()
        return DocumentClient(
            base_url=profile.url,
            token=get_token(),
            timeout=profile.timeout,
            verify_ssl=profile.verify_ssl,
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


# =============================================================================
# Global Options
# =============================================================================


def global_options(f: F) -> F:
    """Add global options to a command."""

    @click.option(
        "--profile",
        "-p",
        envvar="DOCUPLOAD_PROFILE",
        help="Config profile to use",
    )
    @click.option(
        "--output",
        "-o",
        "output_format",
        type=click.Choice(["json", "table"]),
        default="table",
        help="Output format",
    )
    @click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="Minimal output (document IDs only)",
    )
    @click.option(
        "--verbose",
        "-v",
        is_flag=True,
        help="Enable verbose output",
    )
    @pass_context
    @wraps(f)
    def wrapper(
        ctx: Context,
        profile: Optional[str],
        output_format: str,
        quiet: bool,
        verbose: bool,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        ctx.profile_name = profile
        ctx.output_format = OutputFormat.from_string(output_format)
        ctx.quiet = quiet
        ctx.verbose = verbose

        setup_logging(quiet=quiet, verbose=verbose)
        ctx.config = Config.load()

        return f(ctx, *args, **kwargs)

    return wrapper  # type: ignore


# =============================================================================
# Error Handling
# =============================================================================


def exit_code_for(error: DocUploadError) -> int:
    """Map an error onto a process exit code."""
    if isinstance(error, UploadCancelledError):
        return ExitCode.USER_CANCELLED
    if isinstance(error, PermissionDeniedError):
        return ExitCode.PERMISSION_ERROR
    if isinstance(error, AuthenticationError):
        return ExitCode.AUTH_ERROR
    if isinstance(error, ConnectionError):
        return ExitCode.NETWORK_ERROR
    return ExitCode.GENERAL_ERROR


def handle_errors(f: F) -> F:
    """Handle common errors and convert to CLI exits."""

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except UploadCancelledError:
            print_error("Upload cancelled")
            sys.exit(ExitCode.USER_CANCELLED)
        except KeyboardInterrupt:
            print_error("Interrupted")
            sys.exit(ExitCode.USER_CANCELLED)
        except DocUploadError as e:
            print_error(str(e))
            sys.exit(exit_code_for(e))
        except click.ClickException:
            raise
        except Exception as e:
            print_error(f"Unexpected error: {e}")
            sys.exit(ExitCode.GENERAL_ERROR)

    return wrapper  # type: ignore
