"""Tests for docupload.models."""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from docupload.models.document import Document
from docupload.models.progress import UploadProgress, UploadStatus, UploadSummary
from docupload.models.source import FileSource, guess_mime_type

# =============================================================================
# Document Tests
# =============================================================================


class TestDocument:
    """Tests for the Document model."""

    def test_parses_server_payload(self, document_payload):
        doc = Document.model_validate(document_payload)

        assert doc.original_name == "report.pdf"
        assert doc.file_path == "uploads/2026/report.pdf"
        assert doc.file_url == "https://files.example.org/report.pdf"
        assert doc.user_id == "user-42"
        assert isinstance(doc.created_at, datetime)

    def test_optional_fields(self, document_payload):
        payload = {k: v for k, v in document_payload.items() if k not in ("fileURL", "authorNickname")}

        doc = Document.model_validate(payload)

        assert doc.file_url is None
        assert doc.author_nickname is None

    def test_to_row(self, document_payload):
        row = Document.model_validate(document_payload).to_row()

        assert row["size_display"] == "5.0 MB"
        assert row["original_name"] == "report.pdf"
        assert set(row) == set(Document.table_columns())


# =============================================================================
# Progress Tests
# =============================================================================


class TestUploadStatus:
    """Tests for UploadStatus."""

    @pytest.mark.parametrize(
        "status,terminal",
        [
            (UploadStatus.PENDING, False),
            (UploadStatus.UPLOADING, False),
            (UploadStatus.PAUSED, False),
            (UploadStatus.COMPLETED, True),
            (UploadStatus.ERROR, True),
            (UploadStatus.CANCELLED, True),
        ],
    )
    def test_is_terminal(self, status, terminal):
        assert status.is_terminal is terminal


class TestUploadProgress:
    """Tests for UploadProgress."""

    def test_megabytes(self):
        event = UploadProgress(0, 50, 1024 * 1024, 2 * 1024 * 1024)

        assert event.mb_sent == 1.0
        assert event.total_mb == 2.0
        assert not event.is_complete


class TestUploadSummary:
    """Tests for UploadSummary."""

    def test_empty_is_success(self):
        summary = UploadSummary(total=0)

        assert summary.success
        assert summary.success_rate == 100.0
        assert summary.throughput_mbps == 0.0

    def test_cancelled_is_not_success(self):
        summary = UploadSummary(total=1, cancelled=1)

        assert not summary.success


# =============================================================================
# FileSource Tests
# =============================================================================


class TestFileSource:
    """Tests for FileSource."""

    def test_from_path(self, temp_dir: Path):
        path = temp_dir / "scan.png"
        path.write_bytes(b"0123456789")

        source = FileSource.from_path(path)

        assert source.name == "scan.png"
        assert source.size == 10
        assert source.mime_type == "image/png"
        assert source.read_range(2, 5) == b"234"
        assert source.read_all() == b"0123456789"

    def test_from_path_rejects_directory(self, temp_dir: Path):
        with pytest.raises(ValueError):
            FileSource.from_path(temp_dir)

    def test_from_bytes(self):
        source = FileSource.from_bytes("data.bin", b"abc", mime_type="application/x-custom")

        assert source.size == 3
        assert source.mime_type == "application/x-custom"
        assert source.read_range(1, 3) == b"bc"

    def test_invalid_range(self):
        source = FileSource.from_bytes("a.txt", b"abc")

        with pytest.raises(ValueError):
            source.read_range(2, 4)

    @pytest.mark.asyncio
    async def test_async_read_uses_worker_thread(self, temp_dir: Path):
        path = temp_dir / "scan.bin"
        path.write_bytes(b"0123456789")
        source = FileSource.from_path(path)
        calls = []
        real_to_thread = asyncio.to_thread

        async def recording_to_thread(func, *args):
            calls.append(args)
            return await real_to_thread(func, *args)

        with patch("docupload.models.source.asyncio.to_thread", recording_to_thread):
            assert await source.aread_range(2, 5) == b"234"
            assert await source.aread_all() == b"0123456789"

        assert calls == [(2, 5), (0, 10)]

    @pytest.mark.asyncio
    async def test_async_read_in_memory(self):
        source = FileSource.from_bytes("a.txt", b"abc")

        with patch("docupload.models.source.asyncio.to_thread") as to_thread:
            assert await source.aread_all() == b"abc"

        to_thread.assert_not_called()

    def test_unknown_mime_type(self):
        assert guess_mime_type("blob.unknownext") == "application/octet-stream"
