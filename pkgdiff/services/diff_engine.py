"""
Diff Engine - Compute hunked, word-annotated diffs between two file trees
"""

from __future__ import annotations

import logging

from diff_match_patch import diff_match_patch

from pkgdiff.models.archive import FileEntry, FileTree
from pkgdiff.models.diff import (
    DiffFile,
    DiffHunk,
    DiffLine,
    DiffResult,
    DiffStats,
    PackageType,
)
from pkgdiff.services.word_diff import WordDiffer

logger = logging.getLogger(__name__)

CONTEXT_LINES = 3
MAX_LINE_TOKENS = 0x110000  # one code point per distinct line

_LINE_OPS = {
    diff_match_patch.DIFF_EQUAL: "equal",
    diff_match_patch.DIFF_INSERT: "add",
    diff_match_patch.DIFF_DELETE: "delete",
}


def split_lines(content: str | None) -> list[str]:
    """Split on newlines; a trailing newline does not start an extra line"""
    if not content:
        return []
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


class DiffEngine:
    """Diff two extracted package versions"""

    def __init__(
        self,
        context_lines: int = CONTEXT_LINES,
        include_content: bool = True,
        word_differ: WordDiffer | None = None,
        timeout_seconds: float = 1.0,
    ):
        self.context_lines = context_lines
        self.include_content = include_content
        self.word_differ = word_differ or WordDiffer(timeout_seconds)
        self._dmp = diff_match_patch()
        self._dmp.Diff_Timeout = timeout_seconds

    def compute_diff(
        self,
        old_tree: FileTree,
        new_tree: FileTree,
        package_type: PackageType,
        package_name: str,
        from_version: str,
        to_version: str,
    ) -> DiffResult:
        """Generate the structured diff of every path in either tree"""
        files: list[DiffFile] = []
        stats = DiffStats()

        for path in sorted(old_tree.paths() | new_tree.paths()):
            old_file = old_tree.get(path)
            new_file = new_tree.get(path)

            if old_file is None and new_file is not None:
                diff_file = self._added_file(new_file)
                stats.insertions += _count_changes(diff_file, "add")
            elif old_file is not None and new_file is None:
                diff_file = self._deleted_file(old_file)
                stats.deletions += _count_changes(diff_file, "delete")
            else:
                diff_file = self._modified_file(path, old_file, new_file)
                if diff_file is None:
                    continue
                stats.insertions += _count_changes(diff_file, "add")
                stats.deletions += _count_changes(diff_file, "delete")

            files.append(diff_file)
            stats.files += 1

        return DiffResult(
            package_type=package_type,
            package_name=package_name,
            from_version=from_version,
            to_version=to_version,
            files=files,
            stats=stats,
        )

    # ========== Per-file records ==========

    def _added_file(self, file: FileEntry) -> DiffFile:
        diff_file = DiffFile(
            path=file.path,
            status="added",
            is_binary=file.is_binary,
            is_minified=file.is_minified,
        )
        if file.is_binary or file.content is None:
            return diff_file

        lines = split_lines(file.content)
        if lines:
            diff_file.hunks.append(
                DiffHunk(
                    old_start=0,
                    old_count=0,
                    new_start=1,
                    new_count=len(lines),
                    lines=[
                        DiffLine(type="add", new_number=i + 1, content=line)
                        for i, line in enumerate(lines)
                    ],
                )
            )
        if self.include_content:
            diff_file.new_content = file.content
        return diff_file

    def _deleted_file(self, file: FileEntry) -> DiffFile:
        diff_file = DiffFile(
            path=file.path,
            status="deleted",
            is_binary=file.is_binary,
            is_minified=file.is_minified,
        )
        if file.is_binary or file.content is None:
            return diff_file

        lines = split_lines(file.content)
        if lines:
            diff_file.hunks.append(
                DiffHunk(
                    old_start=1,
                    old_count=len(lines),
                    new_start=0,
                    new_count=0,
                    lines=[
                        DiffLine(type="delete", old_number=i + 1, content=line)
                        for i, line in enumerate(lines)
                    ],
                )
            )
        if self.include_content:
            diff_file.old_content = file.content
        return diff_file

    def _modified_file(self, path: str, old_file: FileEntry, new_file: FileEntry) -> DiffFile | None:
        """Diff a path present in both trees; None when nothing observable changed"""
        is_minified = old_file.is_minified or new_file.is_minified

        if old_file.is_binary or new_file.is_binary:
            # Size equality stands in for content equality on binaries
            if old_file.size == new_file.size:
                return None
            return DiffFile(path=path, status="modified", is_binary=True, is_minified=is_minified)

        old_content = old_file.content or ""
        new_content = new_file.content or ""
        if old_content == new_content:
            return None

        hunks = self.compute_hunks(split_lines(old_content), split_lines(new_content))
        if not hunks:
            return None

        diff_file = DiffFile(
            path=path,
            status="modified",
            is_binary=False,
            is_minified=is_minified,
            hunks=hunks,
        )
        if self.include_content:
            diff_file.old_content = old_content
            diff_file.new_content = new_content
        return diff_file

    # ========== Hunking ==========

    def compute_hunks(self, old_lines: list[str], new_lines: list[str]) -> list[DiffHunk]:
        """Group a line diff into hunks with bounded context"""
        hunks: list[DiffHunk] = []
        old_num = 1
        new_num = 1
        current: DiffHunk | None = None
        context: list[DiffLine] = []

        for op, line in self.line_diff(old_lines, new_lines):
            if op == "equal":
                diff_line = DiffLine(type="context", old_number=old_num, new_number=new_num, content=line)
                old_num += 1
                new_num += 1

                if current is not None:
                    current.lines.append(diff_line)
                    context.append(diff_line)
                    if len(context) > self.context_lines:
                        self._finish_hunk(hunks, current, context)
                        current = None
                        context = []
                else:
                    context.append(diff_line)
                    if len(context) > self.context_lines:
                        context.pop(0)
                continue

            if current is None:
                current = DiffHunk(
                    old_start=max(1, old_num - len(context)),
                    old_count=0,
                    new_start=max(1, new_num - len(context)),
                    new_count=0,
                    lines=list(context),
                )
            context = []

            if op == "delete":
                current.lines.append(DiffLine(type="delete", old_number=old_num, content=line))
                old_num += 1
            else:
                current.lines.append(DiffLine(type="add", new_number=new_num, content=line))
                new_num += 1

        if current is not None and current.has_changes():
            current.update_counts()
            hunks.append(current)

        for hunk in hunks:
            self._annotate_words(hunk)
        return hunks

    def line_diff(self, old_lines: list[str], new_lines: list[str]) -> list[tuple[str, str]]:
        """Line-granularity diff: each distinct line becomes one code point"""
        line_array: list[str] = []
        line_hash: dict[str, str] = {}

        def lines_to_chars(lines: list[str]) -> str:
            chars = []
            for line in lines:
                char = line_hash.get(line)
                if char is None:
                    char = chr(len(line_array))
                    line_array.append(line)
                    line_hash[line] = char
                chars.append(char)
            return "".join(chars)

        if len(set(old_lines).union(new_lines)) > MAX_LINE_TOKENS:
            logger.warning("Too many distinct lines to diff, reporting a full rewrite")
            return [("delete", line) for line in old_lines] + [("add", line) for line in new_lines]

        chars1 = lines_to_chars(old_lines)
        chars2 = lines_to_chars(new_lines)

        result = []
        for op, chars in self._dmp.diff_main(chars1, chars2, False):
            kind = _LINE_OPS[op]
            result.extend((kind, line_array[ord(char)]) for char in chars)
        return result

    def _finish_hunk(self, hunks: list[DiffHunk], hunk: DiffHunk, context: list[DiffLine]) -> None:
        """Trim trailing context down to the window, then keep the hunk if it changes anything"""
        while hunk.lines and len(context) > self.context_lines:
            if hunk.lines[-1].type != "context":
                break
            hunk.lines.pop()
            context.pop(0)

        hunk.update_counts()
        if hunk.has_changes():
            hunks.append(hunk)

    def _annotate_words(self, hunk: DiffHunk) -> None:
        """Pair delete runs with the add runs that follow them, position by position"""
        lines = hunk.lines
        i = 0
        while i < len(lines):
            if lines[i].type != "delete":
                i += 1
                continue

            deleted = []
            while i < len(lines) and lines[i].type == "delete":
                deleted.append(lines[i])
                i += 1
            added = []
            while i < len(lines) and lines[i].type == "add":
                added.append(lines[i])
                i += 1

            for old_line, new_line in zip(deleted, added):
                spans = self.word_differ.diff_words(old_line.content, new_line.content)
                old_line.word_diff = [s for s in spans if s.type != "insert"]
                new_line.word_diff = [s for s in spans if s.type != "delete"]


def _count_changes(diff_file: DiffFile, line_type: str) -> int:
    return sum(1 for hunk in diff_file.hunks for line in hunk.lines if line.type == line_type)


def compute_diff(
    old_tree: FileTree,
    new_tree: FileTree,
    package_type: PackageType,
    package_name: str,
    from_version: str,
    to_version: str,
) -> DiffResult:
    """Diff two trees with the default engine settings"""
    return DiffEngine().compute_diff(old_tree, new_tree, package_type, package_name, from_version, to_version)
