"""Tests for docupload.services.uploads."""

from __future__ import annotations

from pathlib import Path

import pytest

from docupload.core.config import UploadSettings
from docupload.core.exceptions import UploadError, ValidationError
from docupload.services.uploads import UploadService, collect_sources


@pytest.fixture
def files(temp_dir: Path) -> list[Path]:
    paths = []
    for name, size in [("a.txt", 10), ("b.pdf", 7), ("empty.bin", 0)]:
        path = temp_dir / name
        path.write_bytes(b"z" * size)
        paths.append(path)
    return paths


@pytest.fixture
def service(transport, sleep_spy) -> UploadService:
    settings = UploadSettings(chunk_size=4, chunk_delay=0.0, max_concurrent_files=2)
    return UploadService(transport, settings, sleep=sleep_spy)


class TestCollectSources:
    """Tests for collect_sources function."""

    def test_builds_sources_in_order(self, files: list[Path]):
        sources = collect_sources(files)

        assert [s.name for s in sources] == ["a.txt", "b.pdf", "empty.bin"]
        assert [s.size for s in sources] == [10, 7, 0]
        assert sources[1].mime_type == "application/pdf"

    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(ValidationError):
            collect_sources([temp_dir / "missing.txt"])

    def test_directory_rejected(self, temp_dir: Path):
        with pytest.raises(ValidationError):
            collect_sources([temp_dir])


class TestUploadService:
    """Tests for UploadService."""

    def test_queue_capacity_from_settings(self, service):
        assert service.queue.max_concurrent == 2

    @pytest.mark.asyncio
    async def test_upload_paths(self, service, transport, files):
        events = []

        summary = await service.upload_paths(files, events.append)

        assert summary.total == 3
        assert summary.succeeded == 3
        assert summary.success
        assert summary.total_bytes == 17
        assert [d.original_name for d in summary.documents] == ["a.txt", "b.pdf", "empty.bin"]
        assert [s.name for s in transport.simple_uploads] == ["empty.bin"]
        assert {e.file_index for e in events} == {0, 1, 2}
        assembled = {transport.names[fid]: transport.assembled(fid) for fid in transport.finalized}
        assert assembled == {"a.txt": b"z" * 10, "b.pdf": b"z" * 7}

    @pytest.mark.asyncio
    async def test_callback_removed_after_run(self, service, files):
        events = []
        await service.upload_paths(files[:1], events.append)
        count = len(events)

        await service.upload_paths(files[:1])

        assert len(events) == count

    @pytest.mark.asyncio
    async def test_failures_collected(self, service, transport, files):
        transport.failures[0] = [UploadError("HTTP 500: disk full", status_code=500)]

        summary = await service.upload_paths(files[:1])

        assert summary.failed == 1
        assert summary.succeeded == 0
        assert not summary.success
        assert "a.txt" in summary.errors[0]
        assert "disk full" in summary.errors[0]

    @pytest.mark.asyncio
    async def test_missing_path_uploads_nothing(self, service, transport, files, temp_dir):
        with pytest.raises(ValidationError):
            await service.upload_paths([*files, temp_dir / "missing.txt"])

        assert transport.chunk_calls == []
        assert transport.simple_uploads == []

    @pytest.mark.asyncio
    async def test_empty_input(self, service):
        summary = await service.upload_paths([])

        assert summary.total == 0
        assert summary.success

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self, service, transport):
        async with service:
            pass

        assert transport.closed
