"""Configuration and download path helpers for vsixinstall."""

import os
import tempfile
from pathlib import Path


def get_config_dir() -> Path:
    """Return XDG-compliant config directory: ~/.config/vsixinstall"""
    return Path.home() / ".config" / "vsixinstall"


def get_config_path(create: bool = False) -> Path:
    """Return path to user config file.

    Priority:
    1. VSIXINSTALL_CONFIG environment variable (if set)
    2. ~/.config/vsixinstall/config.json (default XDG location)

    Args:
        create: If True, create the parent directory if missing

    Returns:
        Path to config file
    """
    if "VSIXINSTALL_CONFIG" in os.environ:
        config_path = Path(os.environ["VSIXINSTALL_CONFIG"])
    else:
        config_path = get_config_dir() / "config.json"

    if create:
        config_path.parent.mkdir(parents=True, exist_ok=True)
    return config_path


def get_default_download_dir() -> Path:
    """Return the scratch directory artifacts are downloaded into."""
    return Path(tempfile.gettempdir()) / "vscode-plugins"


def artifact_filename(identifier: str, version: str) -> str:
    """Return the local file name for one identifier at one version."""
    return f"{identifier}-{version}.vsix"
