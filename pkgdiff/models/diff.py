"""Diff-related data models"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

PackageType = Literal["npm", "wp"]
DiffStatus = Literal["added", "deleted", "modified"]


class WordChange(BaseModel):
    """A contiguous span of an intraline diff"""

    type: Literal["equal", "insert", "delete"]
    text: str


class DiffLine(BaseModel):
    """A single line inside a hunk"""

    type: Literal["context", "add", "delete"]
    old_number: int | None = None  # 1-indexed, None for added lines
    new_number: int | None = None  # 1-indexed, None for deleted lines
    content: str
    word_diff: list[WordChange] | None = None


class DiffHunk(BaseModel):
    """A contiguous change region with surrounding context"""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: list[DiffLine] = []

    def update_counts(self) -> None:
        """Recompute old/new counts from the lines"""
        self.old_count = sum(1 for line in self.lines if line.type != "add")
        self.new_count = sum(1 for line in self.lines if line.type != "delete")

    def has_changes(self) -> bool:
        return any(line.type != "context" for line in self.lines)


class DiffFile(BaseModel):
    """Diff of a single file between two package versions"""

    path: str
    status: DiffStatus
    is_binary: bool
    is_minified: bool
    hunks: list[DiffHunk] = []
    old_content: str | None = None
    new_content: str | None = None


class DiffStats(BaseModel):
    """Aggregate counters over a whole diff"""

    files: int = 0
    insertions: int = 0
    deletions: int = 0


class DiffResult(BaseModel):
    """Complete diff between two versions of a package"""

    package_type: PackageType
    package_name: str
    from_version: str
    to_version: str
    files: list[DiffFile]
    stats: DiffStats
