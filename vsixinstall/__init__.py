"""Install VS Code extensions together with their dependency closure."""

import logging
import sys

from .config import ConfigError, Settings, load_settings
from .errors import (
    AlreadyInstalledError,
    DownloadError,
    InstallError,
    HostQueryError,
    ManifestError,
    Phase,
    RegistryError,
    ValidationError,
    VsixInstallError,
    describe_failure,
    format_error,
)
from .pipeline import install_package, resolve_package

__version__ = "0.3.0"

_debug_enabled = False


def set_debug(enabled: bool):
    """Enable or disable debug mode globally."""
    global _debug_enabled
    _debug_enabled = enabled


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return _debug_enabled


def setup_logging(debug: bool = False) -> None:
    """Route package log records to stderr.

    DEBUG and above with --debug, warnings only otherwise. Safe to call
    more than once.
    """
    set_debug(debug)
    logger = logging.getLogger(__name__)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    handler = logging.StreamHandler(sys.stderr)
    if debug:
        handler.setFormatter(
            logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
        )
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)


__all__ = [
    "__version__",
    "set_debug",
    "is_debug",
    "setup_logging",
    "ConfigError",
    "Settings",
    "load_settings",
    "Phase",
    "VsixInstallError",
    "ValidationError",
    "AlreadyInstalledError",
    "RegistryError",
    "DownloadError",
    "ManifestError",
    "InstallError",
    "HostQueryError",
    "describe_failure",
    "format_error",
    "install_package",
    "resolve_package",
]
