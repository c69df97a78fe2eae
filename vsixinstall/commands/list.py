"""List command implementation."""

import asyncio

import click

from vsixinstall import setup_logging
from vsixinstall.errors import VsixInstallError
from vsixinstall.pipeline import create_host
from vsixinstall.commands.utils import exit_with_failure, load_settings_or_exit


@click.command(name="list")
@click.pass_context
def list_installed(ctx):
    """List plugins installed in the editor."""
    debug = ctx.obj.get("debug", False)
    setup_logging(debug)
    settings = load_settings_or_exit()

    try:
        installed = asyncio.run(create_host(settings).list_installed())
    except VsixInstallError as e:
        exit_with_failure(e)
        return

    if not installed:
        click.echo("No plugins installed.")
        return

    for identifier in sorted(installed, key=str.lower):
        click.echo(identifier)
    click.echo(f"\n{len(installed)} plugin(s) installed.")
