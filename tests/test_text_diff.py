"""Tests for the line diff engine."""

import tracemalloc

import pytest

from dircompare.core.diff.text_diff import DiffAlgorithm, LineDiffer, split_lines
from dircompare.core.models import DiffTag, FileDiff, LineChange


ALGORITHMS = list(DiffAlgorithm)


def rebuild(changes, side_tag):
    return ''.join(c.value for c in changes if c.tag in (DiffTag.UNCHANGED, side_tag))


def tags(changes):
    return [c.tag for c in changes]


class TestSplitLines:

    def test_keeps_newlines(self):
        assert split_lines("a\nb\n") == ["a\n", "b\n"]

    def test_trailing_text(self):
        assert split_lines("a\nb") == ["a\n", "b"]

    def test_empty(self):
        assert split_lines("") == []

    def test_crlf_stays_together(self):
        assert split_lines("a\r\nb\r\n") == ["a\r\n", "b\r\n"]

    def test_blank_lines(self):
        assert split_lines("\n\n") == ["\n", "\n"]


@pytest.mark.parametrize("algorithm", ALGORITHMS)
class TestLineDiffer:

    def test_single_line_change(self, algorithm):
        changes = LineDiffer(algorithm).diff_lines("a\nb\n", "a\nc\n")

        assert changes == [
            LineChange("a\n", DiffTag.UNCHANGED),
            LineChange("b\n", DiffTag.REMOVED),
            LineChange("c\n", DiffTag.ADDED),
        ]

    def test_identical(self, algorithm):
        changes = LineDiffer(algorithm).diff_lines("x\ny\n", "x\ny\n")

        assert changes == [LineChange("x\ny\n", DiffTag.UNCHANGED)]

    def test_both_empty(self, algorithm):
        assert LineDiffer(algorithm).diff_lines("", "") == []

    def test_from_empty(self, algorithm):
        changes = LineDiffer(algorithm).diff_lines("", "a\nb\n")

        assert changes == [LineChange("a\nb\n", DiffTag.ADDED)]

    def test_to_empty(self, algorithm):
        changes = LineDiffer(algorithm).diff_lines("a\nb\n", "")

        assert changes == [LineChange("a\nb\n", DiffTag.REMOVED)]

    def test_missing_final_newline(self, algorithm):
        changes = LineDiffer(algorithm).diff_lines("a\nb", "a\nb\n")

        assert changes == [
            LineChange("a\n", DiffTag.UNCHANGED),
            LineChange("b", DiffTag.REMOVED),
            LineChange("b\n", DiffTag.ADDED),
        ]

    def test_removed_precedes_added(self, algorithm):
        changes = LineDiffer(algorithm).diff_lines("1\nold1\nold2\n2\n", "1\nnew\n2\n")

        assert tags(changes) == [
            DiffTag.UNCHANGED, DiffTag.REMOVED, DiffTag.ADDED, DiffTag.UNCHANGED,
        ]
        assert changes[1].value == "old1\nold2\n"
        assert changes[1].line_count == 2

    def test_runs_are_maximal(self, algorithm):
        old = "a\nb\nc\nd\ne\nf\n"
        new = "a\nX\nc\nd\nY\nZ\nf\n"

        changes = LineDiffer(algorithm).diff_lines(old, new)

        for first, second in zip(changes, changes[1:]):
            assert first.tag != second.tag

    @pytest.mark.parametrize("old, new", [
        ("a\nb\nc\n", "c\nb\na\n"),
        ("one\ntwo\nthree", "zero\none\nthree\nfour"),
        ("x\r\ny\r\n", "x\r\nz\r\n"),
        ("\n\n\n", "\n"),
        ("same\n" * 50 + "tail\n", "head\n" + "same\n" * 50),
    ])
    def test_reconstructs_both_sides(self, algorithm, old, new):
        changes = LineDiffer(algorithm).diff_lines(old, new)

        assert rebuild(changes, DiffTag.REMOVED) == old
        assert rebuild(changes, DiffTag.ADDED) == new
        assert all(c.value for c in changes)


def test_myers_is_minimal():
    changes = LineDiffer(DiffAlgorithm.MYERS).diff_lines("a\nb\nc\na\nb\nb\na\n", "c\nb\na\nb\na\nc\n")

    stats = FileDiff("", "", changes).statistics
    # The classic example has an edit distance of 5
    assert stats.total_changes == 5


def test_modified_is_not_a_line_tag():
    with pytest.raises(ValueError):
        LineChange("x\n", DiffTag.MODIFIED)


def test_file_diff_statistics_and_dict():
    changes = LineDiffer().diff_lines("a\nb\n", "a\nc\nd\n")
    file_diff = FileDiff("a\nb\n", "a\nc\nd\n", changes)

    assert str(file_diff.statistics) == "+2 -1 =1"
    assert not file_diff.is_identical
    assert file_diff.to_dict()['changes'][0] == {'value': 'a\n', 'type': 'unchanged'}


def test_disjoint_inputs_stay_bounded():
    old = ''.join(f"old line {i}\n" for i in range(3000))
    new = ''.join(f"new line {i}\n" for i in range(3000))

    tracemalloc.start()
    try:
        changes = LineDiffer(DiffAlgorithm.MYERS).diff_lines(old, new)
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()

    assert changes == [LineChange(old, DiffTag.REMOVED), LineChange(new, DiffTag.ADDED)]
    assert peak < 64 * 1024 * 1024


def test_edit_distance_cap_falls_back():
    old = "keep\n" + "".join(f"a{i}\n" for i in range(40)) + "tail\n"
    new = "keep\n" + "".join(f"b{i}\n" for i in range(40)) + "tail\n"

    changes = LineDiffer(DiffAlgorithm.MYERS, max_edit_distance=10).diff_lines(old, new)

    assert rebuild(changes, DiffTag.REMOVED) == old
    assert rebuild(changes, DiffTag.ADDED) == new
    assert tags(changes) == [
        DiffTag.UNCHANGED, DiffTag.REMOVED, DiffTag.ADDED, DiffTag.UNCHANGED,
    ]


def test_common_prefix_and_suffix_are_unchanged_runs():
    shared = "".join(f"line {i}\n" for i in range(5000))

    changes = LineDiffer(DiffAlgorithm.MYERS).diff_lines(shared + "x\n" + shared, shared + "y\n" + shared)

    assert changes == [
        LineChange(shared, DiffTag.UNCHANGED),
        LineChange("x\n", DiffTag.REMOVED),
        LineChange("y\n", DiffTag.ADDED),
        LineChange(shared, DiffTag.UNCHANGED),
    ]
