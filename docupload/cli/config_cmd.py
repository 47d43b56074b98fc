"""Config commands for docupload."""

from __future__ import annotations

import click

from docupload.core import config as config_module
from docupload.core.config import Config, UploadSettings
from docupload.core.exceptions import DocUploadError
from docupload.core.output import OutputFormat, print_error, print_key_value, print_output, print_success
from docupload.core.validation import validate_server_url


@click.group()
def config() -> None:
    """Manage docupload configuration."""
    pass


def _load_or_exit() -> Config:
    try:
        return Config.load()
    except DocUploadError as e:
        print_error(str(e))
        raise SystemExit(1)


@config.command("init")
@click.option("--url", prompt="Document server URL", help="Document server URL")
@click.option("--profile", default="default", help="Profile name")
@click.option("--timeout", type=int, default=None, help="Request timeout in seconds")
@click.option("--no-verify-ssl", is_flag=True, help="Disable SSL verification")
@click.option("--force", is_flag=True, help="Overwrite an existing profile")
def config_init(
    url: str,
    profile: str,
    timeout: int | None,
    no_verify_ssl: bool,
    force: bool,
) -> None:
    """Create or extend the configuration file with a profile.

    Example:
        docupload config init --url https://docs.example.org/api
    """
    try:
        url = validate_server_url(url)
    except DocUploadError as e:
        print_error(str(e))
        raise SystemExit(1)

    config_file = config_module.CONFIG_FILE
    cfg = _load_or_exit() if config_file.exists() else Config()
    if cfg.has_profile(profile) and not force:
        print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
        raise SystemExit(1)

    cfg.add_profile(
        name=profile,
        url=url,
        verify_ssl=not no_verify_ssl,
        timeout=timeout or config_module.DEFAULT_HTTP_TIMEOUT_SECONDS,
        upload=UploadSettings(),
    )
    if len(cfg.profiles) == 1:
        cfg.default_profile = profile
    cfg.save(config_file)

    print_success(f"Configuration saved to {config_file}")
    print_key_value({"profile": profile, "url": url})


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration."""
    cfg = _load_or_exit()

    if not cfg.profiles:
        print_error("No configuration found. Run 'docupload config init' first.")
        raise SystemExit(1)

    if output == "json":
        print_output(
            {
                "config_file": str(config_module.CONFIG_FILE),
                "default_profile": cfg.default_profile,
                "profiles": {name: p.to_dict() for name, p in cfg.profiles.items()},
            },
            format=OutputFormat.JSON,
        )
        return

    print_key_value(
        {
            "config_file": str(config_module.CONFIG_FILE),
            "default_profile": cfg.default_profile,
            "profiles": list(cfg.profiles),
        },
        title="Configuration",
    )
    for name, profile in cfg.profiles.items():
        marker = " (default)" if name == cfg.default_profile else ""
        click.echo()
        click.echo(f"Profile: {name}{marker}")
        print_key_value(
            {
                "url": profile.url,
                "verify_ssl": profile.verify_ssl,
                "timeout": f"{profile.timeout}s",
                "chunk_size": f"{profile.upload.chunk_size // 1024} KiB",
                "max_concurrent_chunks": profile.upload.max_concurrent_chunks,
                "max_concurrent_files": profile.upload.max_concurrent_files,
            }
        )


@config.command("use-context")
@click.argument("profile")
def config_use_context(profile: str) -> None:
    """Switch the active profile.

    Example:
        docupload config use-context staging
    """
    cfg = _load_or_exit()

    if not cfg.has_profile(profile):
        print_error(f"Profile '{profile}' not found.")
        click.echo(f"Available profiles: {', '.join(cfg.profiles) or '-'}")
        raise SystemExit(1)

    cfg.set_default_profile(profile)
    cfg.save(config_module.CONFIG_FILE)

    print_success(f"Switched to profile '{profile}'")
