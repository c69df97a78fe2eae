"""Single entry point: validate, resolve, then install one root package."""

import logging
from typing import Any

from .config import Settings
from .errors import AlreadyInstalledError
from .host import CodeCliHost
from .identifiers import extract_identifier, parse_identifier
from .installer import (
    InstallReport,
    Installer,
    ResolutionPlan,
    Resolver,
    WorkList,
)
from .registry import GalleryClient

_logging = logging.getLogger(__name__)


def create_registry(settings: Settings) -> GalleryClient:
    return GalleryClient(settings.gallery_url, timeout=settings.request_timeout)


def create_host(settings: Settings) -> CodeCliHost:
    return CodeCliHost(settings.code_command, install_timeout=settings.install_timeout)


def prepare_root(raw_input: str) -> str:
    """Turn user input (id or marketplace URL) into a validated identifier.

    Raises:
        ValidationError: Before any network or host access
    """
    identifier = extract_identifier(raw_input)
    parse_identifier(identifier)
    return identifier


async def resolve_package(
    raw_input: str,
    *,
    settings: Settings,
    registry: Any,
    host: Any,
) -> ResolutionPlan:
    """Download a package and its dependency closure without installing.

    Raises:
        ValidationError: Malformed identifier
        AlreadyInstalledError: Root already present on the host
        RegistryError, DownloadError: From anywhere in the dependency tree
    """
    root = prepare_root(raw_input)

    if await host.is_installed(root):
        raise AlreadyInstalledError(f"Plugin {root} is already installed!", identifier=root)

    worklist = WorkList()
    resolver = Resolver(
        registry,
        host,
        worklist,
        settings.download_dir,
        settings.dependency_fields,
    )
    await resolver.resolve(root)

    _logging.info(
        f"Resolved {root}: discovery order {', '.join(worklist.identifiers())}"
    )
    return ResolutionPlan(
        root=root, artifacts=list(worklist), diagnostics=list(resolver.diagnostics)
    )


async def install_resolved(
    plan: ResolutionPlan, *, settings: Settings, host: Any
) -> InstallReport:
    """Install a resolved plan, dependencies first."""
    installer = Installer(
        host,
        WorkList.from_handles(plan.artifacts),
        keep_artifacts=settings.keep_artifacts,
        verify_attempts=settings.verify_attempts,
        verify_interval=settings.verify_interval,
    )
    outcomes = await installer.install_all()
    return InstallReport(
        root=plan.root,
        discovery_order=plan.discovery_order,
        outcomes=outcomes,
        diagnostics=list(plan.diagnostics),
    )


async def install_package(
    raw_input: str,
    *,
    settings: Settings,
    registry: Any = None,
    host: Any = None,
) -> InstallReport:
    """Resolve then install one root package and everything it requires.

    A registry or host not supplied is built from settings; a registry built
    here is also closed here.

    Raises:
        VsixInstallError: Subclass naming the identifier and failing phase
    """
    host = host or create_host(settings)
    owns_registry = registry is None
    registry = registry or create_registry(settings)

    try:
        plan = await resolve_package(
            raw_input, settings=settings, registry=registry, host=host
        )
    finally:
        if owns_registry:
            await registry.stop()

    return await install_resolved(plan, settings=settings, host=host)


__all__ = [
    "create_registry",
    "create_host",
    "prepare_root",
    "resolve_package",
    "install_resolved",
    "install_package",
]
