"""Embedded manifest reading for downloaded .vsix artifacts."""

import json
import logging
import zipfile
import zlib
from pathlib import Path
from typing import Any

from .errors import ManifestError

MANIFEST_MEMBER = "extension/package.json"
DEFAULT_DEPENDENCY_FIELDS = ("extensionDependencies",)

_logging = logging.getLogger(__name__)


def read_embedded_manifest(artifact_path: Path) -> dict[str, Any] | None:
    """Open the artifact as a zip archive and decode its package.json.

    Returns None when the archive has no manifest member.

    Raises:
        ManifestError: If the archive cannot be opened or the manifest is
            not a JSON object
    """
    try:
        with zipfile.ZipFile(artifact_path) as archive:
            try:
                raw = archive.read(MANIFEST_MEMBER)
            except KeyError:
                return None
    except (
        zipfile.BadZipFile,
        OSError,
        EOFError,
        zlib.error,
        # encrypted member, or NotImplementedError for unknown compression
        RuntimeError,
    ) as e:
        raise ManifestError(f"Cannot read archive {artifact_path}: {e}") from e

    try:
        data = json.loads(raw.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestError(f"Invalid manifest in {artifact_path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(
            f"Manifest in {artifact_path} must be an object, got {type(data).__name__}"
        )
    return data


def extract_dependencies(
    manifest: dict[str, Any] | None,
    fields: list[str] | tuple[str, ...] = DEFAULT_DEPENDENCY_FIELDS,
) -> list[str]:
    """Collect declared dependency identifiers in declaration order.

    Fields that are absent yield nothing. Entries that are not strings are
    skipped with a warning. Duplicates keep their first position.
    """
    if not manifest:
        return []

    found: list[str] = []
    seen: set[str] = set()
    for field_name in fields:
        value = manifest.get(field_name)
        if value is None:
            continue
        if not isinstance(value, list):
            _logging.warning(
                f"Manifest field '{field_name}' must be a list, got {type(value).__name__}"
            )
            continue
        for item in value:
            if not isinstance(item, str) or not item.strip():
                _logging.warning(f"Skipping invalid entry in '{field_name}': {item!r}")
                continue
            dep = item.strip()
            if dep.lower() in seen:
                continue
            seen.add(dep.lower())
            found.append(dep)
    return found


__all__ = [
    "MANIFEST_MEMBER",
    "read_embedded_manifest",
    "extract_dependencies",
]
