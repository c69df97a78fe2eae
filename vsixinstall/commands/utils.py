"""Shared helpers for commands."""

import sys
from pathlib import Path

import click

from vsixinstall.config import ConfigError, Settings, load_settings
from vsixinstall.errors import VsixInstallError, describe_failure, format_suggestion


def load_settings_or_exit(download_dir: Path | None = None) -> Settings:
    """Load user settings, printing the error and exiting 1 on failure.

    Args:
        download_dir: Optional override from the command line
    """
    try:
        settings = load_settings()
    except ConfigError as e:
        click.echo(
            format_suggestion(
                str(e), "run 'vsixinstall config init --force' to reset the settings file"
            ),
            err=True,
        )
        sys.exit(1)

    if download_dir is not None:
        settings.download_dir = Path(download_dir)
    return settings


def exit_with_failure(error: VsixInstallError) -> None:
    click.echo(describe_failure(error), err=True)
    sys.exit(1)
