"""Tests for docupload.core.validation module."""

from __future__ import annotations

import pytest

from docupload.core.exceptions import InvalidURLError, ValidationError
from docupload.core.validation import (
    validate_file_name,
    validate_server_url,
    validate_total_chunks,
    validate_workers,
)


class TestValidateServerUrl:
    """Tests for validate_server_url."""

    def test_valid_https(self):
        assert validate_server_url("https://docs.example.org/api") == "https://docs.example.org/api"

    def test_strips_trailing_slash_and_whitespace(self):
        assert validate_server_url("  http://localhost:3000/ ") == "http://localhost:3000"

    @pytest.mark.parametrize("url", ["", "   ", "docs.example.org", "ftp://docs.example.org", "https://"])
    def test_invalid(self, url):
        with pytest.raises(InvalidURLError):
            validate_server_url(url)


class TestValidateFileName:
    """Tests for validate_file_name."""

    def test_valid(self):
        assert validate_file_name("report.pdf") == "report.pdf"

    def test_max_length_allowed(self):
        name = "a" * 255

        assert validate_file_name(name) == name

    def test_too_long(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_file_name("a" * 256)

        assert exc_info.value.field == "file_name"

    def test_empty(self):
        with pytest.raises(ValidationError):
            validate_file_name("")


class TestValidateTotalChunks:
    """Tests for validate_total_chunks."""

    @pytest.mark.parametrize("total", [1, 500, 1000])
    def test_within_limits(self, total):
        assert validate_total_chunks(total) == total

    @pytest.mark.parametrize("total", [0, 1001])
    def test_out_of_limits(self, total):
        with pytest.raises(ValidationError):
            validate_total_chunks(total)


class TestValidateWorkers:
    """Tests for validate_workers."""

    def test_valid(self):
        assert validate_workers(3) == 3

    def test_zero(self):
        with pytest.raises(ValidationError, match="max_concurrent"):
            validate_workers(0, field="max_concurrent")
