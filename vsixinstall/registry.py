"""Marketplace gallery client: version lookup and artifact download."""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.parse
import zlib
from pathlib import Path
from typing import Any, Dict, Optional

import aiohttp

from .config import DEFAULT_GALLERY_URL, DEFAULT_REQUEST_TIMEOUT
from .errors import DownloadError, RegistryError
from .identifiers import parse_identifier
from .installer.models import VersionInfo

logger = logging.getLogger(__name__)

# Criteria filter type for "extension name" in the gallery query API
FILTER_EXTENSION_NAME = 7
# IncludeVersions | IncludeFiles | IncludeVersionProperties | ExcludeNonValidated | IncludeAssetUri
QUERY_FLAGS = 914
PRE_RELEASE_PROPERTY = "Microsoft.VisualStudio.Code.PreRelease"
QUERY_ACCEPT = "application/json;api-version=3.0-preview.1"
DOWNLOAD_CHUNK_SIZE = 64 * 1024


def is_pre_release(version_entry: Dict[str, Any]) -> bool:
    """Return True if a gallery version entry is flagged pre-release."""
    for prop in version_entry.get("properties") or []:
        if not isinstance(prop, dict):
            continue
        if prop.get("key") == PRE_RELEASE_PROPERTY:
            return str(prop.get("value", "")).lower() == "true"
    return False


def select_latest_stable(identifier: str, payload: Any) -> VersionInfo:
    """Pick the first non pre-release version from a query payload.

    The gallery returns versions newest first, so registry order decides.

    Raises:
        RegistryError: If the payload has no such extension or no stable version
    """
    try:
        extensions = payload["results"][0]["extensions"]
    except (KeyError, IndexError, TypeError):
        raise RegistryError(
            f"Unexpected gallery response for {identifier}", identifier=identifier
        )

    if not extensions:
        raise RegistryError(
            f"Package {identifier} not found in registry", identifier=identifier
        )

    versions = extensions[0].get("versions") or []
    for entry in versions:
        if not isinstance(entry, dict) or not entry.get("version"):
            continue
        if is_pre_release(entry):
            continue
        return VersionInfo(identifier=identifier, version=str(entry["version"]))

    raise RegistryError(
        f"No stable version published for {identifier}", identifier=identifier
    )


class GalleryClient:
    """Client for the marketplace gallery API."""

    def __init__(
        self,
        gallery_url: str = DEFAULT_GALLERY_URL,
        timeout: int = DEFAULT_REQUEST_TIMEOUT,
    ):
        """Initialize the gallery client.

        Args:
            gallery_url: Base URL of the gallery API.
            timeout: Total timeout per request in seconds.
        """
        self._gallery_url = gallery_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def gallery_url(self) -> str:
        return self._gallery_url

    async def start(self) -> None:
        """Start the HTTP session."""
        if self._session is None:
            # gzip bodies are decoded explicitly so downloads can stream to disk
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                auto_decompress=False,
            )

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def query_url(self) -> str:
        return f"{self._gallery_url}/extensionquery"

    def download_url(self, identifier: str, version: str) -> str:
        """Build the vspackage URL for one identifier at one version."""
        ident = parse_identifier(identifier)
        publisher = urllib.parse.quote(ident.publisher, safe="")
        name = urllib.parse.quote(ident.name, safe="")
        ver = urllib.parse.quote(version, safe="")
        return (
            f"{self._gallery_url}/publishers/{publisher}"
            f"/vsextensions/{name}/{ver}/vspackage"
        )

    @staticmethod
    def build_query(identifier: str) -> Dict[str, Any]:
        return {
            "filters": [
                {
                    "criteria": [
                        {"filterType": FILTER_EXTENSION_NAME, "value": identifier}
                    ]
                }
            ],
            "flags": QUERY_FLAGS,
        }

    async def _session_or_start(self) -> aiohttp.ClientSession:
        if self._session is None:
            await self.start()
        assert self._session is not None
        return self._session

    async def query_latest_stable_version(self, identifier: str) -> VersionInfo:
        """Look up the newest stable version of a package.

        Args:
            identifier: Package identifier (publisher.name).

        Returns:
            VersionInfo for the first non pre-release version.

        Raises:
            RegistryError: On transport failure, timeout, non-200 status,
                malformed payload or no stable version.
        """
        session = await self._session_or_start()
        url = self.query_url()
        headers = {
            "Content-Type": "application/json",
            "Accept": QUERY_ACCEPT,
            "Accept-Encoding": "gzip",
        }
        logger.debug(
            "Registry query",
            extra={"event": "registry_query", "identifier": identifier, "target": url},
        )

        try:
            async with session.post(
                url, json=self.build_query(identifier), headers=headers
            ) as response:
                body = await response.read()
                if response.status != 200:
                    raise RegistryError(
                        f"Registry query for {identifier} failed: HTTP {response.status}",
                        identifier=identifier,
                    )
                encoding = response.headers.get("Content-Encoding", "")
                charset = response.charset or "utf-8"
        except aiohttp.ClientError as e:
            raise RegistryError(
                f"Registry query for {identifier} failed: {e}", identifier=identifier
            ) from e
        except asyncio.TimeoutError as e:
            raise RegistryError(
                f"Registry query for {identifier} timed out", identifier=identifier
            ) from e

        try:
            if encoding.lower() == "gzip":
                body = zlib.decompress(body, 16 + zlib.MAX_WBITS)
            payload = json.loads(body.decode(charset))
        except (zlib.error, UnicodeDecodeError, ValueError) as e:
            raise RegistryError(
                f"Registry returned an unreadable response for {identifier}: {e}",
                identifier=identifier,
            ) from e

        info = select_latest_stable(identifier, payload)
        logger.info(f"Resolved {identifier} to version {info.version}")
        return info

    async def download_artifact(
        self, identifier: str, version: str, destination: Path
    ) -> Path:
        """Stream an artifact to a local path.

        A gzip-encoded transport body is decompressed before writing. On any
        failure the partially written file is deleted before the error
        propagates.

        Raises:
            DownloadError: On non-200 status, transport failure, corrupt gzip
                stream or local write failure.
        """
        session = await self._session_or_start()
        url = self.download_url(identifier, version)
        logger.info(f"Downloading {identifier}@{version} from {url}")

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            async with session.get(url, headers={"Accept-Encoding": "gzip"}) as response:
                if response.status != 200:
                    raise DownloadError(
                        f"Failed to download {identifier}: HTTP {response.status}",
                        identifier=identifier,
                    )
                gzipped = response.headers.get("Content-Encoding", "").lower() == "gzip"
                decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS) if gzipped else None
                with open(destination, "wb") as f:
                    async for chunk in response.content.iter_chunked(DOWNLOAD_CHUNK_SIZE):
                        if decompressor is not None:
                            chunk = decompressor.decompress(chunk)
                        f.write(chunk)
                    if decompressor is not None:
                        f.write(decompressor.flush())
                        if not decompressor.eof:
                            raise DownloadError(
                                f"Truncated gzip stream for {identifier}",
                                identifier=identifier,
                            )
        except DownloadError:
            destination.unlink(missing_ok=True)
            raise
        except aiohttp.ClientError as e:
            destination.unlink(missing_ok=True)
            raise DownloadError(
                f"Failed to download {identifier}: {e}", identifier=identifier
            ) from e
        except asyncio.TimeoutError as e:
            destination.unlink(missing_ok=True)
            raise DownloadError(
                f"Download of {identifier} timed out", identifier=identifier
            ) from e
        except zlib.error as e:
            destination.unlink(missing_ok=True)
            raise DownloadError(
                f"Corrupt gzip stream for {identifier}: {e}", identifier=identifier
            ) from e
        except OSError as e:
            destination.unlink(missing_ok=True)
            raise DownloadError(
                f"Failed to write plugin file {destination}: {e}", identifier=identifier
            ) from e

        logger.debug(
            "Artifact downloaded",
            extra={
                "event": "artifact_downloaded",
                "identifier": identifier,
                "version": version,
                "path": str(destination),
            },
        )
        return destination

    async def __aenter__(self) -> "GalleryClient":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.stop()


__all__ = [
    "GalleryClient",
    "is_pre_release",
    "select_latest_stable",
]
