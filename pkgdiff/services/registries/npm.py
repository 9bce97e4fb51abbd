"""npm registry client"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from pkgdiff.models.archive import ArchiveFormat
from pkgdiff.services.errors import FetchFailed, PackageNotFound, VersionNotFound
from pkgdiff.services.fetcher import fetch_json
from pkgdiff.services.registries.base import Registry
from pkgdiff.services.versions import sort_versions

logger = logging.getLogger(__name__)

NPM_REGISTRY = "https://registry.npmjs.org"


def encode_package_name(name: str) -> str:
    """Escape a package name for the registry path (``@scope/pkg`` -> ``@scope%2Fpkg``)"""
    if name.startswith("@"):
        return "@" + quote(name[1:], safe="")
    return quote(name, safe="")


class NpmRegistry(Registry):
    """Packages published to an npm-compatible registry"""

    package_type = "npm"
    archive_format = ArchiveFormat.TAR_GZIP

    def __init__(self, base_url: str = NPM_REGISTRY, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")

    async def _get_metadata(self, name: str) -> dict[str, Any]:
        async def load() -> dict[str, Any]:
            url = f"{self.base_url}/{encode_package_name(name)}"
            status, data = await fetch_json(url, timeout_seconds=self.timeout_seconds)
            if status == 404:
                raise PackageNotFound(name, self.package_type)
            if status != 200 or not isinstance(data, dict):
                raise FetchFailed(url, status=status, reason="unexpected registry response")
            logger.debug("Loaded npm metadata for %s", name)
            return data

        return await self.cache.get_or_set(f"npm:metadata:{name}", load, self.metadata_ttl)

    async def list_versions(self, name: str) -> list[str]:
        metadata = await self._get_metadata(name)
        return sort_versions(metadata.get("versions", {}).keys())

    async def resolve_download_url(self, name: str, version: str) -> str:
        metadata = await self._get_metadata(name)
        versions = metadata.get("versions", {})
        version_data = versions.get(version)
        if not version_data:
            raise VersionNotFound(name, [version], sort_versions(versions.keys()))
        return version_data["dist"]["tarball"]

    async def is_valid_version(self, name: str, version: str) -> bool:
        metadata = await self._get_metadata(name)
        return version in metadata.get("versions", {})
