"""Tests for PackageDiffService orchestration."""

import asyncio

import pytest

from helpers import build_tgz, build_zip
from pkgdiff.models.archive import ArchiveFormat
from pkgdiff.services.errors import ArchiveTooLarge, PackageNotFound, VersionNotFound
from pkgdiff.services.package_diff import (
    PackageDiffService,
    get_package_diff_service,
    reset_package_diff_service,
)
from pkgdiff.services.registries.base import Registry

ARCHIVES = {
    "https://example.test/demo-1.0.0.tgz": build_tgz(
        [("package/index.js", "module.exports = 1;\n"), ("package/README.md", "# demo\n")]
    ),
    "https://example.test/demo-1.1.0.tgz": build_tgz(
        [("package/index.js", "module.exports = 2;\n"), ("package/README.md", "# demo\n")]
    ),
    "https://example.test/plugin.1.0.zip": build_zip([("plugin/plugin.php", "<?php\n")]),
    "https://example.test/plugin.2.0.zip": build_zip([("plugin/plugin.php", "<?php\necho 1;\n")]),
}


class FakeRegistry(Registry):
    """In-memory registry over a {name: {version: url}} map"""

    def __init__(self, package_type, archive_format, packages):
        super().__init__()
        self.package_type = package_type
        self.archive_format = archive_format
        self.packages = packages

    def _versions(self, name):
        if name not in self.packages:
            raise PackageNotFound(name, self.package_type)
        return self.packages[name]

    async def list_versions(self, name):
        return sorted(self._versions(name), reverse=True)

    async def resolve_download_url(self, name, version):
        versions = self._versions(name)
        if version not in versions:
            raise VersionNotFound(name, [version], sorted(versions, reverse=True))
        return versions[version]

    async def is_valid_version(self, name, version):
        return version in self._versions(name)


@pytest.fixture
def downloads(monkeypatch):
    fetched = []

    async def fetch_bytes(url, timeout_seconds=30, max_size=None, session=None):
        fetched.append(url)
        data = ARCHIVES[url]
        if max_size is not None and len(data) > max_size:
            raise ArchiveTooLarge(len(data), max_size)
        return data

    monkeypatch.setattr("pkgdiff.services.package_diff.fetch_bytes", fetch_bytes)
    return fetched


def make_service(config=None):
    registries = {
        "npm": FakeRegistry(
            "npm",
            ArchiveFormat.TAR_GZIP,
            {
                "demo": {
                    "1.0.0": "https://example.test/demo-1.0.0.tgz",
                    "1.1.0": "https://example.test/demo-1.1.0.tgz",
                }
            },
        ),
        "wp": FakeRegistry(
            "wp",
            ArchiveFormat.ZIP,
            {
                "plugin": {
                    "1.0": "https://example.test/plugin.1.0.zip",
                    "2.0": "https://example.test/plugin.2.0.zip",
                }
            },
        ),
    }
    return PackageDiffService(config or {}, registries=registries)


class TestPackageDiffService:
    """Test PackageDiffService."""

    def test_npm_diff(self, downloads):
        result = asyncio.run(make_service().diff("npm", "demo", "1.0.0", "1.1.0"))

        assert result.package_type == "npm"
        assert [(f.path, f.status) for f in result.files] == [("index.js", "modified")]
        assert result.stats.model_dump() == {"files": 1, "insertions": 1, "deletions": 1}
        assert sorted(downloads) == [
            "https://example.test/demo-1.0.0.tgz",
            "https://example.test/demo-1.1.0.tgz",
        ]

    def test_wordpress_diff(self, downloads):
        result = asyncio.run(make_service().diff("wp", "plugin", "1.0", "2.0"))

        assert [(f.path, f.status) for f in result.files] == [("plugin.php", "modified")]
        assert result.stats.insertions == 1

    def test_result_cached(self, downloads):
        service = make_service()

        async def run():
            first = await service.diff("npm", "demo", "1.0.0", "1.1.0")
            second = await service.diff("npm", "demo", "1.0.0", "1.1.0")
            return first, second

        first, second = asyncio.run(run())

        assert first is second
        assert len(downloads) == 2

    def test_invalid_versions_reported_together(self, downloads):
        with pytest.raises(VersionNotFound) as exc_info:
            asyncio.run(make_service().diff("npm", "demo", "0.1.0", "0.2.0"))

        error = exc_info.value
        assert error.message == "Invalid versions: 0.1.0, 0.2.0"
        assert error.available_versions == ["1.1.0", "1.0.0"]
        assert downloads == []

    def test_unknown_package(self, downloads):
        with pytest.raises(PackageNotFound):
            asyncio.run(make_service().diff("npm", "missing", "1.0.0", "1.1.0"))

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            make_service().registry("pypi")

    def test_archive_limit_from_config(self, downloads):
        service = make_service({"limits": {"maxArchiveSize": 10}})

        with pytest.raises(ArchiveTooLarge):
            asyncio.run(service.diff("npm", "demo", "1.0.0", "1.1.0"))

    def test_engine_settings_from_config(self):
        service = make_service({"diff": {"contextLines": 1, "includeContent": False}, "cache": {"maxEntries": 4}})

        assert service.engine.context_lines == 1
        assert service.engine.include_content is False
        assert service.cache.max_entries == 4

    def test_list_versions(self):
        assert asyncio.run(make_service().list_versions("wp", "plugin")) == ["2.0", "1.0"]


class TestSharedService:
    """Test the module-level service instance."""

    def test_built_from_config_and_reset(self, isolated_config):
        first = get_package_diff_service()

        assert get_package_diff_service() is first
        assert set(first.registries) == {"npm", "wp"}

        reset_package_diff_service()
        assert get_package_diff_service() is not first
