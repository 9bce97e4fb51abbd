"""Services module - Business logic layer"""

from .archive_extractor import ArchiveExtractor, extract_archive
from .config_manager import ConfigManager
from .content_filter import classify_path, detect_language, is_binary_content
from .diff_engine import DiffEngine, compute_diff
from .package_diff import PackageDiffService, get_package_diff_service
from .word_diff import WordDiffer, compute_word_diff, has_significant_changes

__all__ = [
    "ArchiveExtractor",
    "extract_archive",
    "ConfigManager",
    "classify_path",
    "detect_language",
    "is_binary_content",
    "DiffEngine",
    "compute_diff",
    "PackageDiffService",
    "get_package_diff_service",
    "WordDiffer",
    "compute_word_diff",
    "has_significant_changes",
]
