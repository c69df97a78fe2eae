"""Pytest fixtures and fakes for vsixinstall tests."""

import json
import logging
import tempfile
import zipfile
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from vsixinstall.config import Settings
from vsixinstall.errors import DownloadError, InstallError, RegistryError
from vsixinstall.host import Host
from vsixinstall.installer import VersionInfo
from vsixinstall.manifest import MANIFEST_MEMBER, read_embedded_manifest


def write_vsix(path: Path, manifest: dict | None = None, raw: bytes | None = None) -> Path:
    """Write a minimal .vsix archive; raw overrides the manifest bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("extension.vsixmanifest", "<PackageManifest/>")
        if raw is not None:
            archive.writestr(MANIFEST_MEMBER, raw)
        elif manifest is not None:
            archive.writestr(MANIFEST_MEMBER, json.dumps(manifest))
    return path


def write_damaged_vsix(path: Path, manifest: dict) -> Path:
    """Write a .vsix whose deflated manifest member has corrupted compressed bytes."""
    padded = dict(manifest, description=" ".join(str(i) for i in range(400)))
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(MANIFEST_MEMBER, json.dumps(padded))
        info = archive.getinfo(MANIFEST_MEMBER)

    data = bytearray(path.read_bytes())
    offset = info.header_offset
    name_length = int.from_bytes(data[offset + 26:offset + 28], "little")
    extra_length = int.from_bytes(data[offset + 28:offset + 30], "little")
    start = offset + 30 + name_length + extra_length
    for i in range(start, start + min(20, info.compress_size)):
        data[i] ^= 0xFF
    path.write_bytes(bytes(data))
    return path


class FakeRegistry:
    """In-memory registry serving a dependency graph as real .vsix files.

    graph maps identifier to its declared dependencies. Identifiers listed
    in missing fail the version query; those in not_found fail the download
    with HTTP 404; those in corrupt download as a non-zip file and those in
    damaged as a zip whose manifest member cannot be decompressed.
    """

    def __init__(
        self,
        graph: dict[str, list[str]],
        versions: dict[str, str] | None = None,
        missing: set[str] | None = None,
        not_found: set[str] | None = None,
        corrupt: set[str] | None = None,
        damaged: set[str] | None = None,
    ):
        self.graph = graph
        self.versions = versions or {}
        self.missing = missing or set()
        self.not_found = not_found or set()
        self.corrupt = corrupt or set()
        self.damaged = damaged or set()
        self.queries: list[str] = []
        self.downloads: list[str] = []
        self.stopped = False

    async def query_latest_stable_version(self, identifier: str) -> VersionInfo:
        self.queries.append(identifier)
        if identifier in self.missing or identifier not in self.graph:
            raise RegistryError(f"Package {identifier} not found in registry", identifier=identifier)
        return VersionInfo(identifier=identifier, version=self.versions.get(identifier, "1.0.0"))

    async def download_artifact(self, identifier: str, version: str, destination: Path) -> Path:
        self.downloads.append(identifier)
        if identifier in self.not_found:
            destination.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download {identifier}: HTTP 404", identifier=identifier)
        if identifier in self.corrupt:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(b"not a zip archive")
            return destination
        publisher, _, name = identifier.partition(".")
        manifest = {
            "publisher": publisher,
            "name": name,
            "version": version,
            "extensionDependencies": list(self.graph[identifier]),
        }
        if identifier in self.damaged:
            return write_damaged_vsix(destination, manifest)
        return write_vsix(destination, manifest)

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        self.stopped = True

    async def __aenter__(self) -> "FakeRegistry":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()


class FakeHost(Host):
    """Host that records installs by reading each artifact's manifest."""

    def __init__(self, installed: set[str] | None = None, fail_on: set[str] | None = None,
                 register: bool = True):
        self.installed = set(installed or ())
        self.fail_on = fail_on or set()
        self.register = register
        self.install_calls: list[str] = []
        self.query_count = 0

    async def list_installed(self) -> list[str]:
        self.query_count += 1
        return sorted(self.installed)

    async def install_artifact(self, artifact_path: Path) -> None:
        manifest = read_embedded_manifest(artifact_path) or {}
        identifier = f"{manifest.get('publisher')}.{manifest.get('name')}"
        self.install_calls.append(identifier)
        if identifier in self.fail_on:
            raise InstallError("Corrupt extension package")
        if self.register:
            self.installed.add(identifier)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings(temp_dir: Path) -> Settings:
    """Settings downloading into the temp dir without post-install polling delays."""
    return Settings(download_dir=temp_dir / "downloads", verify_interval=0)


@pytest.fixture
def make_registry():
    return FakeRegistry


@pytest.fixture
def make_host():
    return FakeHost


@pytest.fixture
def vsix_writer():
    return write_vsix


@pytest.fixture
def damaged_vsix_writer():
    return write_damaged_vsix


@pytest.fixture
def mock_tty() -> Generator[None, None, None]:
    """Mock sys.stdin.isatty to return True."""
    with patch("sys.stdin.isatty", return_value=True):
        yield


@pytest.fixture
def mock_no_tty() -> Generator[None, None, None]:
    """Mock sys.stdin.isatty to return False."""
    with patch("sys.stdin.isatty", return_value=False):
        yield


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None, None, None]:
    """Drop handlers setup_logging attached to a CliRunner stream."""
    yield
    logger = logging.getLogger("vsixinstall")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
