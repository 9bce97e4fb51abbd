"""Tests for the npm and WordPress.org registry clients."""

import asyncio

import pytest

from pkgdiff.models.archive import ArchiveFormat
from pkgdiff.services.cache import TTLCache
from pkgdiff.services.errors import FetchFailed, PackageNotFound, VersionNotFound
from pkgdiff.services.registries import NpmRegistry, WordPressRegistry, get_registry
from pkgdiff.services.registries.npm import encode_package_name

NPM_METADATA = {
    "name": "left-pad",
    "versions": {
        "1.0.0": {"dist": {"tarball": "https://registry.npmjs.org/left-pad/-/left-pad-1.0.0.tgz"}},
        "1.10.0": {"dist": {"tarball": "https://registry.npmjs.org/left-pad/-/left-pad-1.10.0.tgz"}},
        "1.2.0": {"dist": {"tarball": "https://registry.npmjs.org/left-pad/-/left-pad-1.2.0.tgz"}},
    },
}

WP_METADATA = {
    "slug": "hello-dolly",
    "version": "1.7.2",
    "versions": {
        "1.6": "https://downloads.wordpress.org/plugin/hello-dolly.1.6.zip",
        "1.7.2": "https://downloads.wordpress.org/plugin/hello-dolly.1.7.2.zip",
        "trunk": "https://downloads.wordpress.org/plugin/hello-dolly.zip",
    },
}


def fake_fetch_json(responses, calls):
    async def fetch_json(url, params=None, timeout_seconds=30):
        calls.append((url, params))
        return responses
    return fetch_json


class TestNpmRegistry:
    """Test NpmRegistry."""

    @pytest.fixture
    def calls(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            "pkgdiff.services.registries.npm.fetch_json", fake_fetch_json((200, NPM_METADATA), calls)
        )
        return calls

    def test_list_versions_newest_first(self, calls):
        versions = asyncio.run(NpmRegistry().list_versions("left-pad"))

        assert versions == ["1.10.0", "1.2.0", "1.0.0"]
        assert calls[0][0] == "https://registry.npmjs.org/left-pad"

    def test_resolve_download_url(self, calls):
        url = asyncio.run(NpmRegistry().resolve_download_url("left-pad", "1.2.0"))

        assert url.endswith("left-pad-1.2.0.tgz")

    def test_unknown_version(self, calls):
        with pytest.raises(VersionNotFound) as exc_info:
            asyncio.run(NpmRegistry().resolve_download_url("left-pad", "9.9.9"))

        assert exc_info.value.message == "Invalid version: 9.9.9"
        assert exc_info.value.available_versions == ["1.10.0", "1.2.0", "1.0.0"]

    def test_metadata_cached(self, calls):
        registry = NpmRegistry(cache=TTLCache())

        async def run():
            await registry.list_versions("left-pad")
            assert await registry.is_valid_version("left-pad", "1.0.0")
            assert not await registry.is_valid_version("left-pad", "2.0.0")

        asyncio.run(run())

        assert len(calls) == 1

    def test_missing_package(self, monkeypatch):
        monkeypatch.setattr("pkgdiff.services.registries.npm.fetch_json", fake_fetch_json((404, None), []))

        with pytest.raises(PackageNotFound, match='Package "nope" not found on npm'):
            asyncio.run(NpmRegistry().list_versions("nope"))

    def test_server_error(self, monkeypatch):
        monkeypatch.setattr("pkgdiff.services.registries.npm.fetch_json", fake_fetch_json((503, None), []))

        with pytest.raises(FetchFailed) as exc_info:
            asyncio.run(NpmRegistry().list_versions("left-pad"))
        assert exc_info.value.status == 503

    def test_scoped_name_encoding(self):
        assert encode_package_name("@babel/core") == "@babel%2Fcore"
        assert encode_package_name("lodash") == "lodash"


class TestWordPressRegistry:
    """Test WordPressRegistry."""

    @pytest.fixture
    def calls(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            "pkgdiff.services.registries.wordpress.fetch_json", fake_fetch_json((200, WP_METADATA), calls)
        )
        return calls

    def test_list_versions_excludes_trunk(self, calls):
        versions = asyncio.run(WordPressRegistry().list_versions("hello-dolly"))

        assert versions == ["1.7.2", "1.6"]
        assert calls[0][1] == {"action": "plugin_information", "request[slug]": "hello-dolly"}

    def test_resolve_from_versions_map(self, calls):
        url = asyncio.run(WordPressRegistry().resolve_download_url("hello-dolly", "1.6"))

        assert url == "https://downloads.wordpress.org/plugin/hello-dolly.1.6.zip"

    def test_current_version_without_versions_map(self, monkeypatch):
        metadata = {"slug": "tiny", "version": "0.3"}
        monkeypatch.setattr(
            "pkgdiff.services.registries.wordpress.fetch_json", fake_fetch_json((200, metadata), [])
        )
        registry = WordPressRegistry()

        async def run():
            return (
                await registry.list_versions("tiny"),
                await registry.resolve_download_url("tiny", "0.3"),
                await registry.is_valid_version("tiny", "0.3"),
            )

        versions, url, valid = asyncio.run(run())

        assert versions == ["0.3"]
        assert url == "https://downloads.wordpress.org/plugin/tiny.0.3.zip"
        assert valid

    def test_unknown_version(self, calls):
        with pytest.raises(VersionNotFound) as exc_info:
            asyncio.run(WordPressRegistry().resolve_download_url("hello-dolly", "0.1"))

        assert exc_info.value.available_versions == ["1.7.2", "1.6"]

    @pytest.mark.parametrize("response", [(404, None), (200, False), (200, {"error": "Plugin not found."})])
    def test_missing_plugin(self, monkeypatch, response):
        monkeypatch.setattr("pkgdiff.services.registries.wordpress.fetch_json", fake_fetch_json(response, []))

        with pytest.raises(PackageNotFound, match="not found on WordPress.org"):
            asyncio.run(WordPressRegistry().list_versions("missing"))


class TestGetRegistry:
    """Test get_registry."""

    def test_builds_from_config(self):
        config = {
            "registries": {"npm": {"url": "http://mirror.local/npm/"}},
            "fetch": {"timeoutSeconds": 5},
            "cache": {"metadataTtlSeconds": 60},
        }

        registry = get_registry("npm", config)

        assert isinstance(registry, NpmRegistry)
        assert registry.base_url == "http://mirror.local/npm"
        assert registry.timeout_seconds == 5
        assert registry.metadata_ttl == 60
        assert registry.archive_format is ArchiveFormat.TAR_GZIP

    def test_wordpress_defaults(self):
        registry = get_registry("wp")

        assert isinstance(registry, WordPressRegistry)
        assert registry.archive_format is ArchiveFormat.ZIP

    def test_shares_cache(self):
        cache = TTLCache()

        assert get_registry("npm", cache=cache).cache is cache

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            get_registry("pypi")
