"""Unit tests for the indexed batch line format."""

from booktrans.core.batch_parser import format_batch_lines, missing_positions, parse_indexed_lines


def test_format_numbers_from_one():
    assert format_batch_lines(["A.", "B."]) == "[1] A.\n[2] B."


class TestParseIndexedLines:

    def test_parses_every_tagged_line(self):
        assert parse_indexed_lines("[1] Un.\n[2] Deux.", 2) == {0: "Un.", 1: "Deux."}

    def test_order_comes_from_tags(self):
        assert parse_indexed_lines("[2] Deux.\n[1] Un.", 2) == {0: "Un.", 1: "Deux."}

    def test_tag_without_space(self):
        assert parse_indexed_lines("[1]Un.", 1) == {0: "Un."}

    def test_ignores_untagged_and_out_of_range_lines(self):
        response = "Here you go:\n[0] zero\n[1] Un.\n[3] Trois.\n  \nThanks"
        assert parse_indexed_lines(response, 2) == {0: "Un."}

    def test_last_duplicate_wins(self):
        assert parse_indexed_lines("[1] first\n[1] second", 1) == {0: "second"}

    def test_surrounding_whitespace(self):
        assert parse_indexed_lines("   [1]   Un.   ", 1) == {0: "Un."}

    def test_empty_response(self):
        assert parse_indexed_lines("", 3) == {}

    def test_tag_only_line_is_ignored(self):
        assert parse_indexed_lines("[1]\n[2] Deux.", 2) == {1: "Deux."}


def test_missing_positions():
    assert missing_positions({0: "Un.", 2: "Trois."}, 4) == [1, 3]
    assert missing_positions({}, 0) == []
