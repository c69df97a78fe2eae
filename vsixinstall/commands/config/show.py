"""Show effective settings."""

import json

import click

from vsixinstall.config import settings_to_dict
from vsixinstall.paths import get_config_path
from vsixinstall.commands.utils import load_settings_or_exit


@click.command(name="show")
@click.pass_context
def config_show(ctx):
    """Print the effective settings as JSON.

    Settings missing from the file show their defaults.
    """
    config_path = get_config_path(create=False)
    settings = load_settings_or_exit()

    source = str(config_path) if config_path.exists() else "defaults"
    click.echo(f"// source: {source}")
    click.echo(json.dumps(settings_to_dict(settings), indent=2))
