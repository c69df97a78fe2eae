"""Recursive dependency resolution and artifact fetching."""

import logging
from pathlib import Path
from typing import Any

from ..errors import ManifestError, ValidationError
from ..identifiers import parse_identifier
from ..manifest import DEFAULT_DEPENDENCY_FIELDS, extract_dependencies, read_embedded_manifest
from ..paths import artifact_filename
from .models import ArtifactHandle
from .worklist import WorkList

_logging = logging.getLogger(__name__)


class Resolver:
    """Depth-first resolver that fills one request's work-list.

    ``registry`` provides ``query_latest_stable_version`` and
    ``download_artifact``; ``host`` provides ``is_installed``. Both are
    awaited, so the traversal suspends only at those calls.
    """

    def __init__(
        self,
        registry: Any,
        host: Any,
        worklist: WorkList,
        download_dir: Path,
        dependency_fields: list[str] | tuple[str, ...] = DEFAULT_DEPENDENCY_FIELDS,
    ):
        self.registry = registry
        self.host = host
        self.worklist = worklist
        self.download_dir = Path(download_dir)
        self.dependency_fields = tuple(dependency_fields)
        self.diagnostics: list[str] = []

    def discovery_order(self) -> list[str]:
        return self.worklist.identifiers()

    async def resolve(self, identifier: str) -> None:
        """Resolve one identifier and, recursively, what it declares.

        Registry and download errors propagate and abort this subtree;
        artifacts already queued stay queued.
        """
        if identifier in self.worklist:
            self.worklist.reposition(identifier)
            return

        if await self.host.is_installed(identifier):
            _logging.debug(f"{identifier} is already installed, skipping")
            return

        info = await self.registry.query_latest_stable_version(identifier)
        destination = self.download_dir / artifact_filename(identifier, info.version)
        path = await self.registry.download_artifact(identifier, info.version, destination)

        handle = ArtifactHandle(identifier=identifier, version=info.version, path=Path(path))
        self.worklist.append(handle)

        handle.dependencies = self._declared_dependencies(handle)
        for dependency in handle.dependencies:
            await self.resolve(dependency)

    def _declared_dependencies(self, handle: ArtifactHandle) -> list[str]:
        try:
            manifest = read_embedded_manifest(handle.path)
        except ManifestError as e:
            message = f"Manifest of {handle.identifier} unreadable, assuming no dependencies: {e}"
            _logging.warning(
                message,
                extra={"event": "manifest_unreadable", "identifier": handle.identifier},
            )
            self.diagnostics.append(message)
            return []

        dependencies = []
        for dep in extract_dependencies(manifest, self.dependency_fields):
            try:
                parse_identifier(dep)
            except ValidationError:
                _logging.warning(
                    f"{handle.identifier} declares malformed dependency {dep!r}, skipping"
                )
                self.diagnostics.append(
                    f"{handle.identifier}: skipped malformed dependency {dep!r}"
                )
                continue
            dependencies.append(dep)

        if dependencies:
            _logging.info(f"{handle.identifier} depends on: {', '.join(dependencies)}")
        return dependencies


__all__ = ["Resolver"]
