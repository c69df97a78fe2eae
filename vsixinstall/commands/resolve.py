"""Resolve command implementation."""

import asyncio
from pathlib import Path

import click

from vsixinstall import setup_logging
from vsixinstall.config import Settings
from vsixinstall.errors import VsixInstallError
from vsixinstall.pipeline import create_host, create_registry, resolve_package
from vsixinstall.commands.utils import exit_with_failure, load_settings_or_exit


@click.command()
@click.argument("package")
@click.option(
    "--download-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to download artifacts into",
)
@click.pass_context
def resolve(ctx, package: str, download_dir: Path | None):
    """Show the dependency closure of a plugin and its install order.

    Artifacts are downloaded to read their manifests; nothing is installed.
    """
    debug = ctx.obj.get("debug", False)
    setup_logging(debug)
    settings = load_settings_or_exit(download_dir)

    try:
        asyncio.run(run_resolve(package, settings))
    except VsixInstallError as e:
        exit_with_failure(e)


async def run_resolve(package: str, settings: Settings):
    host = create_host(settings)
    async with create_registry(settings) as registry:
        plan = await resolve_package(package, settings=settings, registry=registry, host=host)

    click.echo("Discovery order:")
    for i, identifier in enumerate(plan.discovery_order, 1):
        click.echo(f"  {i}. {identifier}")

    click.echo("Install order:")
    for i, handle in enumerate(reversed(plan.artifacts), 1):
        click.echo(f"  {i}. {handle.identifier}@{handle.version}")

    for message in plan.diagnostics:
        click.secho(f"⚠️  {message}", fg="yellow")
