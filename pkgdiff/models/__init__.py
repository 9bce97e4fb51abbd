"""Models module - Pydantic data models"""

from .archive import ArchiveFormat, ExtractionLimits, FileEntry, FileTree, FilterResult
from .diff import (
    DiffFile,
    DiffHunk,
    DiffLine,
    DiffResult,
    DiffStats,
    DiffStatus,
    PackageType,
    WordChange,
)
from .registry import ErrorDetail, LimitsResponse, LimitsUpdateRequest, VersionsResponse

__all__ = [
    # Archive models
    "ArchiveFormat",
    "ExtractionLimits",
    "FileEntry",
    "FileTree",
    "FilterResult",
    # Diff models
    "DiffFile",
    "DiffHunk",
    "DiffLine",
    "DiffResult",
    "DiffStats",
    "DiffStatus",
    "PackageType",
    "WordChange",
    # API models
    "ErrorDetail",
    "LimitsResponse",
    "LimitsUpdateRequest",
    "VersionsResponse",
]
