"""
Configuration Manager - Handle backend settings persistence
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manage configuration persistence"""

    _instance = None
    _config_file = None

    def __init__(self, config_dir: str | None = None):
        try:
            # 1. explicit argument or environment variable
            config_dir = config_dir or os.environ.get("PKGDIFF_CONFIG_DIR")

            # 2. home directory ~/.pkgdiff
            if not config_dir:
                config_dir = os.path.expanduser("~/.pkgdiff")

            if config_dir:
                config_path = Path(config_dir)
                try:
                    config_path.mkdir(parents=True, exist_ok=True)
                    self._config_file = config_path / "config.json"
                except OSError as e:
                    logger.warning("Cannot write to %s: %s", config_dir, e)
                    self._config_file = None

            # 3. fall back to the temp directory
            if not self._config_file:
                tmp_dir = Path(tempfile.gettempdir()) / "pkgdiff"
                tmp_dir.mkdir(parents=True, exist_ok=True)
                self._config_file = tmp_dir / "config.json"
                logger.info("Using temporary config path: %s", self._config_file)

        except OSError as e:
            logger.error("Cannot prepare config directory: %s", e)
            self._config_file = Path(tempfile.gettempdir()) / "pkgdiff_config_fallback.json"

        self._config = self._load_config()

    @classmethod
    def get_instance(cls) -> "ConfigManager":
        """Get singleton instance"""
        if cls._instance is None:
            cls._instance = ConfigManager()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        cls._instance = None

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from file, filling missing sections from defaults"""
        config = self._default_config()
        if not self._config_file.exists():
            return config

        try:
            with open(self._config_file) as f:
                stored = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Error loading config: %s", e)
            return config

        for key, value in stored.items():
            if isinstance(value, dict) and isinstance(config.get(key), dict):
                config[key].update(value)
            else:
                config[key] = value
        return config

    def _default_config(self) -> dict[str, Any]:
        """Get default configuration"""
        return {
            "limits": {
                "maxArchiveSize": 15 * 1024 * 1024,
                "maxFiles": 500,
                "maxFileSize": 500 * 1024,
                "maxDecompressedSize": 200 * 1024 * 1024,
            },
            "fetch": {"timeoutSeconds": 30},
            "diff": {"contextLines": 3, "includeContent": True, "timeoutSeconds": 1.0},
            "registries": {
                "npm": {"url": "https://registry.npmjs.org"},
                "wordpress": {
                    "apiUrl": "https://api.wordpress.org/plugins/info/1.2/",
                    "downloadsUrl": "https://downloads.wordpress.org/plugin",
                },
            },
            "cache": {
                "metadataTtlSeconds": 300,
                "diffTtlSeconds": 86400,  # published versions are immutable
                "maxEntries": 256,
            },
            "server": {"host": "0.0.0.0", "port": 8000},
            "logLevel": "INFO",
        }

    def get_config(self) -> dict[str, Any]:
        """Get current configuration"""
        # Reload config from file to ensure we have the latest
        self._config = self._load_config()
        return copy.deepcopy(self._config)

    def save_config(self, config: dict[str, Any]):
        """Save configuration to file"""
        # Merge with existing config
        self._config.update(config)

        # Ensure config directory exists
        self._config_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self._config_file, "w") as f:
                json.dump(self._config, f, indent=2)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}")

    def get(self, key: str, default=None):
        """Get specific config value"""
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set specific config value"""
        self._config[key] = value
        self.save_config(self._config)
