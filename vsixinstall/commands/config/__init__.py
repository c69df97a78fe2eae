"""Configuration management commands."""

import click

from vsixinstall.commands.config.fmt import config_fmt
from vsixinstall.commands.config.init import config_init
from vsixinstall.commands.config.show import config_show


@click.group()
def config():
    """Configuration management commands."""
    pass


config.add_command(config_fmt, name="fmt")
config.add_command(config_init, name="init")
config.add_command(config_show, name="show")
