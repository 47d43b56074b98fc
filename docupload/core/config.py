"""Server profiles and upload tuning, read from YAML and the environment."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from docupload.core.exceptions import ConfigurationError, ProfileNotFoundError

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "docupload"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

# Environment variable names
ENV_URL = "DOCUPLOAD_URL"
ENV_TOKEN = "DOCUPLOAD_TOKEN"
ENV_PROFILE = "DOCUPLOAD_PROFILE"
ENV_VERIFY_SSL = "DOCUPLOAD_VERIFY_SSL"
ENV_TIMEOUT = "DOCUPLOAD_TIMEOUT"

DEFAULT_HTTP_TIMEOUT_SECONDS = 60

# Upload tuning defaults
DEFAULT_CHUNK_SIZE = 2 * 1024 * 1024
DEFAULT_MAX_CONCURRENT_CHUNKS = 3
DEFAULT_MAX_CONCURRENT_FILES = 1
DEFAULT_CHUNK_DELAY = 0.3  # seconds between chunks of one file
DEFAULT_MAX_RETRIES = 5
DEFAULT_RETRY_BASE_DELAY = 2.0  # seconds: 2, 4, 8, 16, 32 (+ jitter)
DEFAULT_RETRY_JITTER = 2.0
DEFAULT_CHUNK_THRESHOLD = 0  # files larger than this are chunked


# =============================================================================
# Upload Settings
# =============================================================================


@dataclass
class UploadSettings:
    """Tuning knobs for the upload orchestrator and queue."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_concurrent_chunks: int = DEFAULT_MAX_CONCURRENT_CHUNKS
    max_concurrent_files: int = DEFAULT_MAX_CONCURRENT_FILES
    chunk_delay: float = DEFAULT_CHUNK_DELAY
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY
    retry_jitter: float = DEFAULT_RETRY_JITTER
    chunk_threshold: int = DEFAULT_CHUNK_THRESHOLD

    def validate(self) -> "UploadSettings":
        """Check settings for consistency.

        Returns:
            Self, for chaining.

        Raises:
            ConfigurationError: If a value is out of range.
        """
        if self.chunk_size <= 0:
            raise ConfigurationError("chunk_size must be positive", "chunk_size", self.chunk_size)
        if self.max_concurrent_chunks < 1:
            raise ConfigurationError(
                "max_concurrent_chunks must be at least 1",
                "max_concurrent_chunks",
                self.max_concurrent_chunks,
            )
        if self.max_concurrent_files < 1:
            raise ConfigurationError(
                "max_concurrent_files must be at least 1",
                "max_concurrent_files",
                self.max_concurrent_files,
            )
        if self.chunk_delay < 0:
            raise ConfigurationError(
                "chunk_delay cannot be negative", "chunk_delay", self.chunk_delay
            )
        if self.max_retries < 0:
            raise ConfigurationError(
                "max_retries cannot be negative", "max_retries", self.max_retries
            )
        if self.retry_base_delay <= 0:
            raise ConfigurationError(
                "retry_base_delay must be positive", "retry_base_delay", self.retry_base_delay
            )
        # Backoff delays stay strictly increasing only while jitter <= base delay
        if not 0 <= self.retry_jitter <= self.retry_base_delay:
            raise ConfigurationError(
                "retry_jitter must be between 0 and retry_base_delay",
                "retry_jitter",
                self.retry_jitter,
            )
        if self.chunk_threshold < 0:
            raise ConfigurationError(
                "chunk_threshold cannot be negative", "chunk_threshold", self.chunk_threshold
            )
        return self

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UploadSettings":
        """Create from dictionary, falling back to defaults for missing keys."""
        return cls(
            chunk_size=int(data.get("chunk_size", DEFAULT_CHUNK_SIZE)),
            max_concurrent_chunks=int(
                data.get("max_concurrent_chunks", DEFAULT_MAX_CONCURRENT_CHUNKS)
            ),
            max_concurrent_files=int(
                data.get("max_concurrent_files", DEFAULT_MAX_CONCURRENT_FILES)
            ),
            chunk_delay=float(data.get("chunk_delay", DEFAULT_CHUNK_DELAY)),
            max_retries=int(data.get("max_retries", DEFAULT_MAX_RETRIES)),
            retry_base_delay=float(data.get("retry_base_delay", DEFAULT_RETRY_BASE_DELAY)),
            retry_jitter=float(data.get("retry_jitter", DEFAULT_RETRY_JITTER)),
            chunk_threshold=int(data.get("chunk_threshold", DEFAULT_CHUNK_THRESHOLD)),
        )


# =============================================================================
# Profile
# =============================================================================


@dataclass
class Profile:
    """Configuration profile for a document server."""

    url: str
    verify_ssl: bool = True
    timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS
    upload: UploadSettings = field(default_factory=UploadSettings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "verify_ssl": self.verify_ssl,
            "timeout": self.timeout,
            "upload": self.upload.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        return cls(
            url=data.get("url", ""),
            verify_ssl=data.get("verify_ssl", True),
            timeout=data.get("timeout", DEFAULT_HTTP_TIMEOUT_SECONDS),
            upload=UploadSettings.from_dict(data.get("upload") or {}),
        )


# =============================================================================
# Config
# =============================================================================


@dataclass
class Config:
    """Contents of the config file, overlaid with environment overrides."""

    default_profile: str = "default"
    output_format: str = "table"
    profiles: dict[str, Profile] = field(default_factory=dict)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Read ``config_path`` (default ``CONFIG_FILE``) if it exists.

        ``DOCUPLOAD_URL`` replaces the ``default`` profile server while keeping
        its upload settings; ``DOCUPLOAD_PROFILE`` selects the active profile.

        Raises:
            ConfigurationError: If the file cannot be parsed.
        """
        path = config_path or CONFIG_FILE
        config = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

                config.default_profile = data.get("default_profile", "default")
                config.output_format = data.get("output_format", "table")

                for name, pdata in (data.get("profiles") or {}).items():
                    config.profiles[name] = Profile.from_dict(pdata or {})
            except (OSError, yaml.YAMLError, AttributeError, TypeError, ValueError) as e:
                raise ConfigurationError(f"Failed to load config: {e}") from e

        if url := os.getenv(ENV_URL):
            verify_ssl = os.getenv(ENV_VERIFY_SSL, "true").lower() in ("true", "1", "yes")
            timeout = int(os.getenv(ENV_TIMEOUT, str(DEFAULT_HTTP_TIMEOUT_SECONDS)))
            existing = config.profiles.get("default")

            config.profiles["default"] = Profile(
                url=url,
                verify_ssl=verify_ssl,
                timeout=timeout,
                upload=existing.upload if existing else UploadSettings(),
            )

        if profile := os.getenv(ENV_PROFILE):
            config.default_profile = profile

        return config

    def save(self, config_path: Optional[Path] = None) -> None:
        """Write the config as YAML. Tokens are never written."""
        path = config_path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "default_profile": self.default_profile,
            "output_format": self.output_format,
            "profiles": {name: p.to_dict() for name, p in self.profiles.items()},
        }

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def get_profile(self, name: Optional[str] = None) -> Profile:
        """Return ``name``, or the default profile when ``name`` is None."""
        name = name or self.default_profile
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        return self.profiles[name]

    def has_profile(self, name: str) -> bool:
        return name in self.profiles

    def add_profile(
        self,
        name: str,
        url: str,
        verify_ssl: bool = True,
        timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS,
        upload: Optional[UploadSettings] = None,
    ) -> Profile:
        """Create or replace profile ``name`` and return it."""
        profile = Profile(
            url=url,
            verify_ssl=verify_ssl,
            timeout=timeout,
            upload=upload or UploadSettings(),
        )
        self.profiles[name] = profile
        return profile

    def remove_profile(self, name: str) -> bool:
        return self.profiles.pop(name, None) is not None

    def set_default_profile(self, name: str) -> None:
        """Make ``name`` the active profile; it must already exist."""
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        self.default_profile = name


def get_token() -> Optional[str]:
    """Bearer token from ``DOCUPLOAD_TOKEN``, if set."""
    return os.getenv(ENV_TOKEN)
