"""
Content Filter - Decide which archive entries are worth diffing
"""

from __future__ import annotations

import re

from pkgdiff.models.archive import FilterResult

EXCLUDED_DIRS = frozenset(
    {
        "node_modules",
        "vendor",
        ".git",
        ".svn",
        ".hg",
        "bower_components",
        ".idea",
        ".vscode",
        "__pycache__",
        ".cache",
    }
)

EXCLUDED_FILES = frozenset(
    {
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        "composer.lock",
        "Gemfile.lock",
        "poetry.lock",
        "flake.lock",
        "Cargo.lock",
        "mix.lock",
        "pubspec.lock",
        "Podfile.lock",
        ".DS_Store",
        "Thumbs.db",
    }
)

BINARY_EXTENSIONS = frozenset(
    {
        # images
        "png", "jpg", "jpeg", "gif", "ico", "webp", "avif", "svg", "bmp", "tiff",
        # fonts
        "woff", "woff2", "ttf", "eot", "otf",
        # documents and archives
        "pdf", "zip", "tar", "gz", "rar", "7z",
        # native code and data
        "exe", "dll", "so", "dylib", "bin", "dat", "db", "sqlite",
        # audio/video
        "mp3", "mp4", "wav", "ogg", "webm", "avi", "mov", "flv", "swf",
        # design files
        "psd", "ai", "eps",
        # compiled
        "class", "jar", "war", "pyc", "pyo", "o", "a", "lib", "obj",
    }
)

MINIFIED_PATTERNS = (
    re.compile(r"\.min\.(js|css)$"),
    re.compile(r"\.bundle\.js$"),
    re.compile(r"-min\.js$"),
    re.compile(r"\.prod\.js$"),
    re.compile(r"\.(js|mjs|cjs|ts|mts|cts|css)\.map$"),
)

SNIFF_WINDOW = 8000
SNIFF_NUL_THRESHOLD = 2

LANGUAGE_MAP = {
    "js": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "jsx": "jsx",
    "ts": "typescript",
    "tsx": "tsx",
    "mts": "typescript",
    "cts": "typescript",
    "json": "json",
    "php": "php",
    "css": "css",
    "scss": "scss",
    "sass": "sass",
    "less": "less",
    "html": "html",
    "htm": "html",
    "xml": "xml",
    "svg": "xml",
    "md": "markdown",
    "mdx": "mdx",
    "yaml": "yaml",
    "yml": "yaml",
    "toml": "toml",
    "ini": "ini",
    "sh": "bash",
    "bash": "bash",
    "zsh": "bash",
    "py": "python",
    "rb": "ruby",
    "go": "go",
    "rs": "rust",
    "java": "java",
    "kt": "kotlin",
    "swift": "swift",
    "c": "c",
    "cpp": "cpp",
    "cc": "cpp",
    "h": "c",
    "hpp": "cpp",
    "cs": "csharp",
    "sql": "sql",
    "vue": "vue",
    "svelte": "svelte",
}


def _extension(file_name: str) -> str:
    """Lowercased final dot-segment (the whole name when it has no dot)"""
    return file_name.rsplit(".", 1)[-1].lower()


def classify_path(path: str) -> FilterResult:
    """Classify a normalized archive path.

    Excluded directories and lockfiles veto inclusion outright. For included
    paths the binary flag comes from the extension only; content sniffing is
    applied separately by the extractor.
    """
    parts = path.split("/")
    file_name = parts[-1]

    if any(part in EXCLUDED_DIRS for part in parts):
        return FilterResult(include=False)

    if file_name in EXCLUDED_FILES:
        return FilterResult(include=False)

    return FilterResult(
        include=True,
        is_binary=_extension(file_name) in BINARY_EXTENSIONS,
        is_minified=any(pattern.search(file_name) for pattern in MINIFIED_PATTERNS),
    )


def is_binary_content(content: bytes) -> bool:
    """NUL-byte heuristic over the first 8000 bytes"""
    return content.count(0, 0, SNIFF_WINDOW) >= SNIFF_NUL_THRESHOLD


def detect_language(path: str) -> str | None:
    """Best-effort language name for syntax highlighting consumers"""
    file_name = path.rsplit("/", 1)[-1]
    if "." not in file_name:
        return None
    return LANGUAGE_MAP.get(_extension(file_name))
