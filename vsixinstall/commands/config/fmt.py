"""Format config command implementation."""

import json
import sys
import uuid
from pathlib import Path

import click

from vsixinstall.config import ConfigError, load_config
from vsixinstall.errors import format_error
from vsixinstall.paths import get_config_path


@click.command(name="fmt")
@click.argument("file", required=False, type=click.Path())
@click.option(
    "--write",
    "-w",
    is_flag=True,
    help="Overwrite the file instead of printing to stdout",
)
@click.pass_context
def config_fmt(ctx, file: str | None, write: bool):
    """Rewrite a JSON-ish settings file as strict JSON.

    Trailing commas and // comments are accepted on input; comments are
    not preserved.

    FILE: Path to settings file (default: ~/.config/vsixinstall/config.json)
    """
    file_path = get_config_path(create=False) if file is None else Path(file)

    if not file_path.exists():
        click.echo(format_error(f"File not found: {file_path}"), err=True)
        sys.exit(1)

    try:
        data = load_config(file_path)
    except ConfigError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)

    formatted = json.dumps(data, indent=2, sort_keys=False)

    if not write:
        click.echo(formatted)
        return

    # Write atomically with unique temp file name
    temp_path = file_path.with_suffix(f".tmp.{uuid.uuid4().hex[:8]}")
    try:
        with open(temp_path, "w") as f:
            f.write(formatted)
            f.write("\n")
        temp_path.replace(file_path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        click.echo(format_error(f"Error writing file: {e}"), err=True)
        sys.exit(1)
    click.echo(f"Formatted {file_path}")
