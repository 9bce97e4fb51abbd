"""Registries module - package ecosystem clients"""

from __future__ import annotations

from typing import Any

from pkgdiff.services.cache import TTLCache

from .base import Registry
from .npm import NPM_REGISTRY, NpmRegistry
from .wordpress import WP_API, WP_DOWNLOADS, WordPressRegistry

PACKAGE_TYPES = ("npm", "wp")


def get_registry(package_type: str, config: dict[str, Any] | None = None, cache: TTLCache | None = None) -> Registry:
    """Build the registry client for a package type from backend config"""
    config = config or {}
    registries = config.get("registries", {})
    options = {
        "timeout_seconds": config.get("fetch", {}).get("timeoutSeconds", 30),
        "metadata_ttl": config.get("cache", {}).get("metadataTtlSeconds", 300),
        "cache": cache,
    }

    if package_type == "npm":
        npm = registries.get("npm", {})
        return NpmRegistry(base_url=npm.get("url", NPM_REGISTRY), **options)
    if package_type == "wp":
        wordpress = registries.get("wordpress", {})
        return WordPressRegistry(
            api_url=wordpress.get("apiUrl", WP_API),
            downloads_url=wordpress.get("downloadsUrl", WP_DOWNLOADS),
            **options,
        )
    raise ValueError(f"Unknown package type: {package_type}")


__all__ = [
    "PACKAGE_TYPES",
    "NpmRegistry",
    "Registry",
    "WordPressRegistry",
    "get_registry",
]
