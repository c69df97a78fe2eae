"""CLI command definitions for vsixinstall."""

import click

from vsixinstall import __version__
from vsixinstall.commands.config import config
from vsixinstall.commands.install import install
from vsixinstall.commands.list import list_installed
from vsixinstall.commands.resolve import resolve


@click.group()
@click.version_option(__version__, prog_name="vsixinstall")
@click.option("--debug", is_flag=True, help="Enable debug output for troubleshooting")
@click.pass_context
def cli(ctx, debug):
    """Install VS Code plugins together with their dependencies."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


cli.add_command(install)
cli.add_command(resolve)
cli.add_command(list_installed, name="list")
cli.add_command(config)

__all__ = ["cli"]


if __name__ == "__main__":
    cli()
