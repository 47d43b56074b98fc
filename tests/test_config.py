"""Tests for docupload.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from docupload.core.config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    Config,
    Profile,
    UploadSettings,
    get_token,
)
from docupload.core.exceptions import ConfigurationError, ProfileNotFoundError

# =============================================================================
# UploadSettings Tests
# =============================================================================


class TestUploadSettings:
    """Tests for UploadSettings dataclass."""

    def test_defaults(self):
        settings = UploadSettings()

        assert settings.chunk_size == 2 * 1024 * 1024
        assert settings.max_concurrent_chunks == 3
        assert settings.max_concurrent_files == 1
        assert settings.chunk_delay == 0.3
        assert settings.max_retries == 5
        assert settings.retry_base_delay == 2.0
        assert settings.retry_jitter == 2.0
        assert settings.chunk_threshold == 0

    def test_validate_returns_self(self):
        settings = UploadSettings()

        assert settings.validate() is settings

    @pytest.mark.parametrize(
        "field,value",
        [
            ("chunk_size", 0),
            ("max_concurrent_chunks", 0),
            ("max_concurrent_files", 0),
            ("chunk_delay", -1.0),
            ("max_retries", -1),
            ("retry_base_delay", 0.0),
            ("retry_jitter", 3.0),
            ("chunk_threshold", -1),
        ],
    )
    def test_validate_rejects(self, field, value):
        settings = UploadSettings(**{field: value})

        with pytest.raises(ConfigurationError):
            settings.validate()

    def test_from_dict_fills_defaults(self):
        settings = UploadSettings.from_dict({"max_concurrent_chunks": 6})

        assert settings.max_concurrent_chunks == 6
        assert settings.chunk_size == DEFAULT_CHUNK_SIZE


# =============================================================================
# Profile Tests
# =============================================================================


class TestProfile:
    """Tests for Profile dataclass."""

    def test_default_values(self):
        profile = Profile(url="https://docs.example.org/api")

        assert profile.verify_ssl is True
        assert profile.timeout == DEFAULT_HTTP_TIMEOUT_SECONDS
        assert profile.upload == UploadSettings()

    def test_to_dict_has_no_token(self):
        data = Profile(url="https://docs.example.org/api").to_dict()

        assert "token" not in data
        assert data["upload"]["chunk_size"] == DEFAULT_CHUNK_SIZE

    def test_from_dict_without_upload_section(self):
        profile = Profile.from_dict({"url": "https://docs.example.org/api", "timeout": 10})

        assert profile.timeout == 10
        assert profile.upload == UploadSettings()


# =============================================================================
# Config Tests
# =============================================================================


class TestConfig:
    """Tests for Config loading and saving."""

    def test_load_missing_file(self, temp_dir: Path, monkeypatch):
        monkeypatch.delenv("DOCUPLOAD_URL", raising=False)
        monkeypatch.delenv("DOCUPLOAD_PROFILE", raising=False)

        config = Config.load(temp_dir / "missing.yaml")

        assert config.profiles == {}
        assert config.default_profile == "default"

    def test_load_from_file(self, temp_dir: Path, sample_config_yaml: str, monkeypatch):
        monkeypatch.delenv("DOCUPLOAD_URL", raising=False)
        monkeypatch.delenv("DOCUPLOAD_PROFILE", raising=False)
        path = temp_dir / "config.yaml"
        path.write_text(sample_config_yaml)

        config = Config.load(path)

        assert config.default_profile == "test"
        test = config.get_profile()
        assert test.url == "https://docs-test.example.org/api"
        assert test.verify_ssl is False
        assert test.upload.chunk_size == 1048576
        assert test.upload.max_concurrent_chunks == 6
        assert test.upload.max_concurrent_files == 2
        assert config.get_profile("production").upload == UploadSettings()

    def test_invalid_yaml_raises(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("profiles: [unclosed")

        with pytest.raises(ConfigurationError):
            Config.load(path)

    def test_env_overrides(self, temp_dir: Path, sample_config_yaml: str, monkeypatch):
        path = temp_dir / "config.yaml"
        path.write_text(sample_config_yaml)
        monkeypatch.setenv("DOCUPLOAD_URL", "https://env.example.org")
        monkeypatch.setenv("DOCUPLOAD_VERIFY_SSL", "false")
        monkeypatch.setenv("DOCUPLOAD_TIMEOUT", "15")
        monkeypatch.setenv("DOCUPLOAD_PROFILE", "default")

        config = Config.load(path)

        profile = config.get_profile()
        assert profile.url == "https://env.example.org"
        assert profile.verify_ssl is False
        assert profile.timeout == 15

    def test_save_and_reload(self, temp_dir: Path, monkeypatch):
        monkeypatch.delenv("DOCUPLOAD_URL", raising=False)
        monkeypatch.delenv("DOCUPLOAD_PROFILE", raising=False)
        path = temp_dir / "nested" / "config.yaml"
        config = Config()
        config.add_profile(
            "staging",
            "https://staging.example.org",
            timeout=20,
            upload=UploadSettings(max_concurrent_files=3),
        )
        config.set_default_profile("staging")

        config.save(path)
        loaded = Config.load(path)

        assert loaded.default_profile == "staging"
        assert loaded.get_profile().timeout == 20
        assert loaded.get_profile().upload.max_concurrent_files == 3

    def test_get_missing_profile(self):
        with pytest.raises(ProfileNotFoundError):
            Config().get_profile("nope")

    def test_set_default_requires_existing(self):
        with pytest.raises(ProfileNotFoundError):
            Config().set_default_profile("nope")

    def test_remove_profile(self):
        config = Config()
        config.add_profile("a", "https://a.example.org")

        assert config.remove_profile("a") is True
        assert config.remove_profile("a") is False


class TestGetToken:
    """Tests for get_token."""

    def test_reads_env(self, monkeypatch):
        monkeypatch.setenv("DOCUPLOAD_TOKEN", "secret")

        assert get_token() == "secret"

    def test_missing(self, monkeypatch):
        monkeypatch.delenv("DOCUPLOAD_TOKEN", raising=False)

        assert get_token() is None
