"""Installation of a resolved work-list through the host."""

import asyncio
import logging
from typing import Any

from ..errors import InstallError
from .models import ArtifactHandle, InstallOutcome
from .worklist import WorkList

_logging = logging.getLogger(__name__)


class Installer:
    """Drains a work-list tail to head, one host install at a time."""

    def __init__(
        self,
        host: Any,
        worklist: WorkList,
        keep_artifacts: bool = False,
        verify_attempts: int = 3,
        verify_interval: float = 1.0,
    ):
        self.host = host
        self.worklist = worklist
        self.keep_artifacts = keep_artifacts
        self.verify_attempts = verify_attempts
        self.verify_interval = verify_interval

    async def install_all(self) -> list[InstallOutcome]:
        """Install every queued artifact, dependencies first.

        Raises:
            InstallError: For the first artifact the host fails to install.
                Artifacts installed before it stay installed.
        """
        outcomes = []

        for handle in self.worklist.drain_order():
            await self._install_one(handle)
            outcomes.append(
                InstallOutcome(
                    identifier=handle.identifier,
                    version=handle.version,
                    status="installed",
                    output=str(handle.path),
                )
            )
            if not self.keep_artifacts:
                handle.path.unlink(missing_ok=True)

        self.worklist.clear()
        return outcomes

    async def _install_one(self, handle: ArtifactHandle) -> None:
        _logging.info(f"Installing {handle.identifier}@{handle.version}")
        try:
            await self.host.install_artifact(handle.path)
            verified = await self._wait_until_installed(handle.identifier)
        except InstallError as e:
            raise InstallError(
                f"Plugin installation failed: {e}", identifier=handle.identifier
            ) from e

        if not verified:
            raise InstallError(
                f"Failed to install plugin: {handle.identifier} not reported by host",
                identifier=handle.identifier,
            )

        _logging.debug(
            "Artifact installed",
            extra={"event": "artifact_installed", "identifier": handle.identifier},
        )

    async def _wait_until_installed(self, identifier: str) -> bool:
        if not self.verify_attempts:
            return True
        for attempt in range(self.verify_attempts):
            if await self.host.is_installed(identifier):
                return True
            if attempt < self.verify_attempts - 1:
                await asyncio.sleep(self.verify_interval)
        return False


__all__ = ["Installer"]
