"""Error taxonomy and message formatting.

Every failure the install pipeline can report derives from VsixInstallError
and carries the identifier it concerns plus the phase it failed in, so the
CLI can print one terminal line per request.

Error Style Guide:
- User-facing errors use 'Error: ' prefix
- Name the identifier and the phase
- Include actionable hints where helpful
"""

from enum import Enum


class Phase(Enum):
    VALIDATION = "validation"
    REGISTRY = "registry"
    DOWNLOAD = "download"
    MANIFEST = "manifest"
    INSTALL = "install"
    HOST_QUERY = "host query"


class VsixInstallError(Exception):
    """Base error for a failed install request."""

    code: str = "UNKNOWN"
    phase: Phase = Phase.VALIDATION

    def __init__(self, message: str, identifier: str | None = None) -> None:
        super().__init__(message)
        self.identifier = identifier


class ValidationError(VsixInstallError):
    """Identifier is malformed."""

    code = "VALIDATION_ERROR"
    phase = Phase.VALIDATION


class AlreadyInstalledError(VsixInstallError):
    """Root package is already present on the host."""

    code = "ALREADY_INSTALLED"
    phase = Phase.VALIDATION


class RegistryError(VsixInstallError):
    """Registry lookup failed or returned no stable version."""

    code = "REGISTRY_ERROR"
    phase = Phase.REGISTRY


class DownloadError(VsixInstallError):
    """Transport, HTTP status or local write failure while downloading."""

    code = "DOWNLOAD_ERROR"
    phase = Phase.DOWNLOAD


class ManifestError(VsixInstallError):
    """Artifact archive or its manifest could not be read."""

    code = "MANIFEST_ERROR"
    phase = Phase.MANIFEST


class InstallError(VsixInstallError):
    """Host install primitive failed."""

    code = "INSTALL_ERROR"
    phase = Phase.INSTALL


class HostQueryError(VsixInstallError):
    """Host could not report its installed packages."""

    code = "HOST_QUERY_ERROR"
    phase = Phase.HOST_QUERY


def format_error(message: str) -> str:
    """Format an error message with consistent prefix.

    Examples:
        >>> format_error("file not found")
        'Error: file not found'
    """
    return f"Error: {message}"


def format_suggestion(message: str, suggestion: str) -> str:
    """Format an error message with a helpful suggestion.

    Examples:
        >>> format_suggestion("config file not found", "run 'vsixinstall config init' to create one")
        "Error: config file not found. Hint: run 'vsixinstall config init' to create one"
    """
    return f"{format_error(message)}. Hint: {suggestion}"


def describe_failure(error: VsixInstallError) -> str:
    """Render a pipeline failure as a single user-facing line.

    Examples:
        >>> describe_failure(DownloadError("HTTP 404", identifier="pub.a"))
        'Error: pub.a failed during download: HTTP 404'
    """
    if error.identifier:
        return format_error(
            f"{error.identifier} failed during {error.phase.value}: {error}"
        )
    return format_error(f"{error.phase.value} failed: {error}")


__all__ = [
    "Phase",
    "VsixInstallError",
    "ValidationError",
    "AlreadyInstalledError",
    "RegistryError",
    "DownloadError",
    "ManifestError",
    "InstallError",
    "HostQueryError",
    "format_error",
    "format_suggestion",
    "describe_failure",
]
