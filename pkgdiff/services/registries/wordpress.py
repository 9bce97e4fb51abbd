"""WordPress.org plugin directory client"""

from __future__ import annotations

import logging
from typing import Any

from pkgdiff.models.archive import ArchiveFormat
from pkgdiff.services.errors import FetchFailed, PackageNotFound, VersionNotFound
from pkgdiff.services.fetcher import fetch_json
from pkgdiff.services.registries.base import Registry
from pkgdiff.services.versions import sort_versions

logger = logging.getLogger(__name__)

WP_API = "https://api.wordpress.org/plugins/info/1.2/"
WP_DOWNLOADS = "https://downloads.wordpress.org/plugin"


class WordPressRegistry(Registry):
    """Plugins hosted on the WordPress.org plugin directory"""

    package_type = "wp"
    archive_format = ArchiveFormat.ZIP

    def __init__(self, api_url: str = WP_API, downloads_url: str = WP_DOWNLOADS, **kwargs):
        super().__init__(**kwargs)
        self.api_url = api_url
        self.downloads_url = downloads_url.rstrip("/")

    async def _get_metadata(self, slug: str) -> dict[str, Any]:
        async def load() -> dict[str, Any]:
            params = {"action": "plugin_information", "request[slug]": slug}
            status, data = await fetch_json(self.api_url, params=params, timeout_seconds=self.timeout_seconds)
            if status == 404 or data is False or (isinstance(data, dict) and data.get("error")):
                raise PackageNotFound(slug, self.package_type)
            if status != 200 or not isinstance(data, dict):
                raise FetchFailed(self.api_url, status=status, reason="unexpected plugin API response")
            logger.debug("Loaded plugin information for %s", slug)
            return data

        return await self.cache.get_or_set(f"wp:metadata:{slug}", load, self.metadata_ttl)

    async def list_versions(self, slug: str) -> list[str]:
        metadata = await self._get_metadata(slug)
        versions = metadata.get("versions") or {}
        if not versions:
            return [metadata["version"]] if metadata.get("version") else []
        return sort_versions(v for v in versions if v != "trunk")

    async def resolve_download_url(self, slug: str, version: str) -> str:
        metadata = await self._get_metadata(slug)
        versions = metadata.get("versions") or {}

        if versions.get(version):
            return versions[version]
        if version == metadata.get("version"):
            return f"{self.downloads_url}/{slug}.{version}.zip"

        raise VersionNotFound(slug, [version], await self.list_versions(slug))

    async def is_valid_version(self, slug: str, version: str) -> bool:
        metadata = await self._get_metadata(slug)
        if version in (metadata.get("versions") or {}):
            return True
        return version == metadata.get("version")
