"""
Word Diff Service - Intraline change highlighting
"""

from __future__ import annotations

from diff_match_patch import diff_match_patch

from pkgdiff.models.diff import WordChange

_OPS = {
    diff_match_patch.DIFF_EQUAL: "equal",
    diff_match_patch.DIFF_INSERT: "insert",
    diff_match_patch.DIFF_DELETE: "delete",
}


class WordDiffer:
    """Character diff with semantic cleanup, grouped into readable spans"""

    def __init__(self, timeout_seconds: float = 1.0):
        self._dmp = diff_match_patch()
        self._dmp.Diff_Timeout = timeout_seconds

    def diff_words(self, old_text: str, new_text: str) -> list[WordChange]:
        diffs = self._dmp.diff_main(old_text, new_text)
        self._dmp.diff_cleanupSemantic(diffs)
        return [WordChange(type=_OPS[op], text=text) for op, text in diffs]

    @staticmethod
    def has_significant_changes(spans: list[WordChange]) -> bool:
        """True when any span is an insertion or deletion"""
        return any(span.type != "equal" for span in spans)


def compute_word_diff(old_text: str, new_text: str) -> list[WordChange]:
    """Diff two strings with a default WordDiffer"""
    return WordDiffer().diff_words(old_text, new_text)


def has_significant_changes(spans: list[WordChange]) -> bool:
    return WordDiffer.has_significant_changes(spans)
