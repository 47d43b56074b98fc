"""Main CLI entry point for docupload."""

from __future__ import annotations

import click

from docupload import __version__
from docupload.cli.config_cmd import config
from docupload.cli.upload import upload


@click.group()
@click.version_option(version=__version__, prog_name="docupload")
def cli() -> None:
    """docupload - resumable chunked uploads to a document server.

    Get started:

      docupload config init             # Create config file

      export DOCUPLOAD_TOKEN=...        # Bearer token

      docupload upload report.pdf       # Upload a file

    Use --help on any command for more information.
    """
    pass


cli.add_command(config)
cli.add_command(upload)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
