"""
Package Diff Service - Resolve, fetch, extract and diff two package versions
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pkgdiff.models.archive import ArchiveFormat, ExtractionLimits, FileTree
from pkgdiff.models.diff import DiffResult
from pkgdiff.services.archive_extractor import ArchiveExtractor
from pkgdiff.services.cache import TTLCache
from pkgdiff.services.config_manager import ConfigManager
from pkgdiff.services.diff_engine import DiffEngine
from pkgdiff.services.errors import VersionNotFound
from pkgdiff.services.fetcher import fetch_bytes
from pkgdiff.services.registries import PACKAGE_TYPES, Registry, get_registry

logger = logging.getLogger(__name__)


class PackageDiffService:
    """Glue between registries, the extractor and the diff engine"""

    def __init__(self, config: dict[str, Any], registries: dict[str, Registry] | None = None):
        self.config = config
        cache_cfg = config.get("cache", {})
        diff_cfg = config.get("diff", {})

        self.cache = TTLCache(max_entries=cache_cfg.get("maxEntries", 256))
        self.diff_ttl = cache_cfg.get("diffTtlSeconds", 86400)
        self.timeout_seconds = config.get("fetch", {}).get("timeoutSeconds", 30)
        self.limits = ExtractionLimits.from_config(config)
        self.engine = DiffEngine(
            context_lines=diff_cfg.get("contextLines", 3),
            include_content=diff_cfg.get("includeContent", True),
            timeout_seconds=diff_cfg.get("timeoutSeconds", 1.0),
        )
        self.registries = registries or {
            package_type: get_registry(package_type, config, self.cache) for package_type in PACKAGE_TYPES
        }

    def registry(self, package_type: str) -> Registry:
        try:
            return self.registries[package_type]
        except KeyError:
            raise ValueError(f"Unknown package type: {package_type}") from None

    async def list_versions(self, package_type: str, name: str) -> list[str]:
        return await self.registry(package_type).list_versions(name)

    async def diff(self, package_type: str, name: str, from_version: str, to_version: str) -> DiffResult:
        """Diff two published versions; raises PackageNotFound/VersionNotFound first"""
        registry = self.registry(package_type)
        versions = await registry.list_versions(name)

        from_valid, to_valid = await asyncio.gather(
            registry.is_valid_version(name, from_version),
            registry.is_valid_version(name, to_version),
        )
        if not from_valid or not to_valid:
            invalid = [v for v, ok in ((from_version, from_valid), (to_version, to_valid)) if not ok]
            raise VersionNotFound(name, invalid, versions)

        async def compute() -> DiffResult:
            return await self._compute(registry, name, from_version, to_version)

        key = f"diff:{package_type}:{name}:{from_version}:{to_version}"
        return await self.cache.get_or_set(key, compute, self.diff_ttl)

    async def _compute(self, registry: Registry, name: str, from_version: str, to_version: str) -> DiffResult:
        from_url, to_url = await asyncio.gather(
            registry.resolve_download_url(name, from_version),
            registry.resolve_download_url(name, to_version),
        )
        old_tree, new_tree = await asyncio.gather(
            self.fetch_and_extract(from_url, registry.archive_format),
            self.fetch_and_extract(to_url, registry.archive_format),
        )

        logger.info(
            "Diffing %s %s (%d files) -> %s (%d files)",
            name,
            from_version,
            len(old_tree.files),
            to_version,
            len(new_tree.files),
        )
        result = await asyncio.to_thread(
            self.engine.compute_diff,
            old_tree,
            new_tree,
            registry.package_type,
            name,
            from_version,
            to_version,
        )
        logger.info(
            "Diff %s %s...%s: %d files, +%d -%d",
            name,
            from_version,
            to_version,
            result.stats.files,
            result.stats.insertions,
            result.stats.deletions,
        )
        return result

    async def fetch_and_extract(self, url: str, archive_format: ArchiveFormat | str) -> FileTree:
        """Download one archive and extract it off the event loop"""
        data = await fetch_bytes(url, self.timeout_seconds, max_size=self.limits.max_archive_size)
        extractor = ArchiveExtractor(self.limits)
        return await asyncio.to_thread(extractor.extract, data, archive_format)


_service: PackageDiffService | None = None


def get_package_diff_service() -> PackageDiffService:
    """Shared service instance built from the current configuration"""
    global _service
    if _service is None:
        _service = PackageDiffService(ConfigManager.get_instance().get_config())
    return _service


def reset_package_diff_service() -> None:
    """Drop the shared instance so the next call picks up new configuration"""
    global _service
    _service = None
