"""Shared pytest fixtures: in-memory archive builders and file trees."""

import pytest

from helpers import build_tgz, build_zip, make_tree
from pkgdiff.services.config_manager import ConfigManager
from pkgdiff.services.package_diff import reset_package_diff_service


@pytest.fixture
def tgz():
    return build_tgz


@pytest.fixture
def zip_archive():
    return build_zip


@pytest.fixture
def tree():
    return make_tree


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point ConfigManager at a temp directory and reset shared singletons."""
    monkeypatch.setenv("PKGDIFF_CONFIG_DIR", str(tmp_path))
    ConfigManager.reset_instance()
    reset_package_diff_service()
    yield tmp_path
    ConfigManager.reset_instance()
    reset_package_diff_service()
