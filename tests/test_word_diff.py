"""Tests for intraline word diffs."""

import pytest

from pkgdiff.models.diff import WordChange
from pkgdiff.services.word_diff import WordDiffer, compute_word_diff, has_significant_changes


def _rebuild(spans, keep):
    return "".join(span.text for span in spans if span.type in keep)


class TestWordDiffer:
    """Test WordDiffer."""

    def test_full_span_change(self):
        spans = compute_word_diff("x", "y")

        assert spans == [WordChange(type="delete", text="x"), WordChange(type="insert", text="y")]

    def test_semantic_cleanup_merges_fragments(self):
        """Tiny shared characters are folded into one delete and one insert."""
        spans = compute_word_diff("mouse", "sofas")

        assert spans == [WordChange(type="delete", text="mouse"), WordChange(type="insert", text="sofas")]

    def test_identical_text(self):
        spans = compute_word_diff("same line", "same line")

        assert spans == [WordChange(type="equal", text="same line")]
        assert has_significant_changes(spans) is False

    @pytest.mark.parametrize(
        "old, new",
        [
            ("const a = 1;", "const b = 2;"),
            ("function foo(bar) {", "async function foo(bar, baz) {"),
            ("", "added"),
            ("removed", ""),
            ("  return value;", "\treturn value;"),
        ],
    )
    def test_spans_rebuild_both_sides(self, old, new):
        spans = WordDiffer().diff_words(old, new)

        assert _rebuild(spans, {"equal", "delete"}) == old
        assert _rebuild(spans, {"equal", "insert"}) == new

    def test_has_significant_changes(self):
        assert has_significant_changes([WordChange(type="equal", text="a"), WordChange(type="insert", text="b")])
        assert not has_significant_changes([])
