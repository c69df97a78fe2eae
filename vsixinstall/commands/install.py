"""Install command implementation."""

import asyncio
import logging
import sys
from pathlib import Path

import click

from vsixinstall import setup_logging
from vsixinstall.config import Settings
from vsixinstall.errors import VsixInstallError, format_error
from vsixinstall.pipeline import (
    create_host,
    create_registry,
    install_resolved,
    prepare_root,
    resolve_package,
)
from vsixinstall.tui import (
    confirm_install_interactive,
    display_plan,
    prompt_identifier_interactive,
)
from vsixinstall.commands.utils import exit_with_failure, load_settings_or_exit

_logging = logging.getLogger(__name__)


@click.command()
@click.argument("package", required=False)
@click.option(
    "--keep",
    is_flag=True,
    help="Keep downloaded .vsix files after installing",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Resolve and download the dependency closure, but do not install",
)
@click.option("--yes", "-y", is_flag=True, help="Install without asking for confirmation")
@click.option(
    "--download-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to download artifacts into",
)
@click.pass_context
def install(
    ctx,
    package: str | None,
    keep: bool,
    dry_run: bool,
    yes: bool,
    download_dir: Path | None,
):
    """Install a plugin and its dependencies.

    PACKAGE is a plugin ID (publisher.name) or a marketplace item URL.
    Prompts for it when omitted and a terminal is attached.
    """
    debug = ctx.obj.get("debug", False)
    setup_logging(debug)
    settings = load_settings_or_exit(download_dir)
    if keep:
        settings.keep_artifacts = True

    if not package:
        if not sys.stdin.isatty():
            click.echo(format_error("missing PACKAGE argument"), err=True)
            sys.exit(1)
        package = prompt_identifier_interactive()
        if not package:
            click.echo("Please enter a valid marketplace link or plugin ID", err=True)
            sys.exit(1)

    try:
        asyncio.run(run_install(package, settings, dry_run, yes))
    except VsixInstallError as e:
        exit_with_failure(e)


async def run_install(package: str, settings: Settings, dry_run: bool, yes: bool):
    root = prepare_root(package)
    host = create_host(settings)

    click.echo(f"Installing plugin: {root}...")
    async with create_registry(settings) as registry:
        plan = await resolve_package(root, settings=settings, registry=registry, host=host)

    display_plan(plan)

    if dry_run:
        click.echo(f"\n[DRY-RUN] Artifacts downloaded to {settings.download_dir}")
        return

    if not yes and sys.stdin.isatty():
        if not confirm_install_interactive(plan):
            click.echo("Installation cancelled.")
            return

    report = await install_resolved(plan, settings=settings, host=host)

    for outcome in report.outcomes:
        click.echo(f"✅ {outcome.identifier}@{outcome.version} installed")
    click.secho(f"Plugin {root} installed successfully!", fg="green")
