"""Host editor primitives: installed-package query and artifact install."""

import logging
import shlex
from abc import ABC, abstractmethod
from pathlib import Path

from .config import DEFAULT_INSTALL_TIMEOUT
from .errors import HostQueryError, InstallError
from .execution import DEFAULT_TIMEOUT, run_command_async

_logging = logging.getLogger(__name__)


class Host(ABC):
    """The editor that owns package activation and installation."""

    @abstractmethod
    async def list_installed(self) -> list[str]:
        """Return identifiers of every installed package.

        Raises HostQueryError when the host cannot answer.
        """

    async def is_installed(self, identifier: str) -> bool:
        """Case-insensitive membership check.

        Raises:
            HostQueryError: If the host cannot list its packages; the error
                names the identifier being checked
        """
        try:
            installed = await self.list_installed()
        except HostQueryError as e:
            if e.identifier:
                raise
            raise HostQueryError(str(e), identifier=identifier) from e
        wanted = identifier.lower()
        return any(i.lower() == wanted for i in installed)

    @abstractmethod
    async def install_artifact(self, artifact_path: Path) -> None:
        """Install one local artifact. Raises InstallError on failure."""


class CodeCliHost(Host):
    """Host backed by the editor's command line (``code``)."""

    def __init__(
        self,
        code_command: str = "code",
        install_timeout: int = DEFAULT_INSTALL_TIMEOUT,
        query_timeout: int = DEFAULT_TIMEOUT,
    ):
        self.code_command = code_command
        self.install_timeout = install_timeout
        self.query_timeout = query_timeout

    def _command(self, *args: str) -> str:
        return " ".join(shlex.quote(part) for part in (self.code_command, *args))

    async def list_installed(self) -> list[str]:
        output, returncode = await run_command_async(
            self._command("--list-extensions"), timeout=self.query_timeout
        )
        if returncode != 0:
            raise HostQueryError(f"Cannot list installed extensions: {output}")
        return [line.strip() for line in output.splitlines() if line.strip()]

    async def install_artifact(self, artifact_path: Path) -> None:
        _logging.info(f"Installing plugin from: {artifact_path}")
        output, returncode = await run_command_async(
            self._command("--install-extension", str(artifact_path)),
            timeout=self.install_timeout,
        )
        if returncode != 0:
            raise InstallError(output or f"{self.code_command} exited with {returncode}")


__all__ = [
    "Host",
    "CodeCliHost",
]
