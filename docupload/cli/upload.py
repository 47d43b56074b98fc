"""Upload command for docupload."""

from __future__ import annotations

import asyncio
import dataclasses
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Optional

import click

from docupload.cli.common import Context, ExitCode, global_options, handle_errors
from docupload.core.client import DocumentClient
from docupload.core.config import UploadSettings
from docupload.core.output import (
    OutputFormat,
    create_progress,
    print_error,
    print_json,
    print_output,
    print_success,
    print_warning,
)
from docupload.models.document import Document
from docupload.models.progress import UploadProgress, UploadSummary
from docupload.services.uploads import UploadService, collect_sources

MIB = 1024 * 1024


def _build_settings(
    base: UploadSettings,
    *,
    max_files: Optional[int],
    max_chunks: Optional[int],
    chunk_size_mib: Optional[float],
    threshold_mib: Optional[float],
) -> UploadSettings:
    """Apply command-line overrides to the profile's upload settings."""
    overrides: dict[str, int] = {}
    if max_files is not None:
        overrides["max_concurrent_files"] = max_files
    if max_chunks is not None:
        overrides["max_concurrent_chunks"] = max_chunks
    if chunk_size_mib is not None:
        overrides["chunk_size"] = int(chunk_size_mib * MIB)
    if threshold_mib is not None:
        overrides["chunk_threshold"] = int(threshold_mib * MIB)
    return dataclasses.replace(base, **overrides).validate()


async def _run_uploads(
    client: DocumentClient,
    settings: UploadSettings,
    paths: list[Path],
    progress_callback: Optional[Callable[[UploadProgress], None]] = None,
) -> UploadSummary:
    async with UploadService(client, settings) as service:
        return await service.upload_paths(paths, progress_callback)


def _print_summary(ctx: Context, summary: UploadSummary) -> None:
    documents: list[Document] = summary.documents

    if ctx.quiet:
        for doc in documents:
            click.echo(doc.id)
        return

    if ctx.output_format == OutputFormat.JSON:
        print_json(
            {
                "total": summary.total,
                "succeeded": summary.succeeded,
                "failed": summary.failed,
                "cancelled": summary.cancelled,
                "duration": round(summary.duration, 3),
                "documents": [doc.to_dict() for doc in documents],
                "errors": summary.errors,
            }
        )
        return

    print_output(
        [doc.to_row() for doc in documents],
        format=OutputFormat.TABLE,
        columns=Document.table_columns(),
        column_labels={"size_display": "Size", "is_private": "Private"},
        title="Uploaded documents",
    )
    for error in summary.errors:
        print_error(error)
    if summary.cancelled:
        print_warning(f"{summary.cancelled} upload(s) cancelled")
    if summary.success:
        print_success(
            f"Uploaded {summary.succeeded} file(s) in {summary.duration:.1f}s "
            f"({summary.throughput_mbps:.2f} MB/s)"
        )


@click.command()
@click.argument(
    "paths",
    metavar="FILES...",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--files", "max_files", type=int, default=None, help="Files uploaded at once")
@click.option("--chunks", "max_chunks", type=int, default=None, help="Chunks in flight at once")
@click.option("--chunk-size", "chunk_size_mib", type=float, default=None, help="Chunk size in MiB")
@click.option(
    "--threshold",
    "threshold_mib",
    type=float,
    default=None,
    help="Files up to this size (MiB) go out in a single request",
)
@global_options
@handle_errors
def upload(
    ctx: Context,
    paths: tuple[Path, ...],
    max_files: Optional[int],
    max_chunks: Optional[int],
    chunk_size_mib: Optional[float],
    threshold_mib: Optional[float],
) -> None:
    """Upload one or more files as documents.

    The bearer token is read from DOCUPLOAD_TOKEN.

    Example:
        docupload upload report.pdf scans/*.png --files 2 --chunks 6
    """
    settings = _build_settings(
        ctx.get_profile().upload,
        max_files=max_files,
        max_chunks=max_chunks,
        chunk_size_mib=chunk_size_mib,
        threshold_mib=threshold_mib,
    )
    path_list = list(paths)
    client = ctx.get_client()

    if ctx.quiet or ctx.output_format == OutputFormat.JSON:
        summary = asyncio.run(_run_uploads(client, settings, path_list))
    else:
        sources = collect_sources(path_list)
        with create_progress() as progress:
            task_ids = [
                progress.add_task(source.name, total=max(source.size, 1)) for source in sources
            ]

            def on_progress(event: UploadProgress) -> None:
                total = max(event.total_bytes, 1)
                done = total if event.is_complete else event.uploaded_bytes
                progress.update(task_ids[event.file_index], total=total, completed=done)

            summary = asyncio.run(_run_uploads(client, settings, path_list, on_progress))

    _print_summary(ctx, summary)

    if summary.failed:
        sys.exit(ExitCode.GENERAL_ERROR)
    if summary.cancelled:
        sys.exit(ExitCode.USER_CANCELLED)
