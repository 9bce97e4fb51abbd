"""Archive extraction data models"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class ArchiveFormat(str, Enum):
    """Supported package archive containers"""

    TAR_GZIP = "tar+gzip"
    ZIP = "zip"


class FilterResult(BaseModel):
    """Outcome of classifying a path"""

    include: bool
    is_binary: bool = False
    is_minified: bool = False


class FileEntry(BaseModel):
    """A single extracted file, frozen once built"""

    model_config = ConfigDict(frozen=True)

    path: str
    content: str | None = None  # None for binary files
    is_binary: bool = False
    is_minified: bool = False
    size: int

    @model_validator(mode="after")
    def _binary_has_no_content(self) -> "FileEntry":
        if self.is_binary and self.content is not None:
            raise ValueError("binary entries cannot carry text content")
        return self


class FileTree(BaseModel):
    """Filtered, size-bounded contents of one archive.

    Only the extractor that builds a tree writes to it; consumers treat it as
    read-only, and its entries are frozen.
    """

    files: dict[str, FileEntry] = {}
    truncated: bool = False  # file-count cap stopped extraction early

    def get(self, path: str) -> FileEntry | None:
        return self.files.get(path)

    def paths(self) -> set[str]:
        return set(self.files)


class ExtractionLimits(BaseModel):
    """Resource caps applied while extracting an archive"""

    max_archive_size: int = 15 * 1024 * 1024
    max_files: int = 500
    max_file_size: int = 500 * 1024
    max_decompressed_size: int = 200 * 1024 * 1024

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ExtractionLimits":
        """Build limits from the ``limits`` section of the backend config"""
        cfg = config.get("limits", {})
        defaults = cls()
        return cls(
            max_archive_size=cfg.get("maxArchiveSize", defaults.max_archive_size),
            max_files=cfg.get("maxFiles", defaults.max_files),
            max_file_size=cfg.get("maxFileSize", defaults.max_file_size),
            max_decompressed_size=cfg.get("maxDecompressedSize", defaults.max_decompressed_size),
        )
