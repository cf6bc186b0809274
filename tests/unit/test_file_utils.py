"""Unit tests for CLI input and output files."""

import json

import pytest

from booktrans.core.models import WorkUnit
from booktrans.utils.file_utils import (
    get_unique_output_path,
    load_units,
    parse_text_units,
    write_translated_text
)


class TestTextUnits:

    def test_one_unit_per_line(self):
        units = parse_text_units("First.\nSecond.\n")
        assert units == [
            WorkUnit(text="First.", chapter_index=0, sentence_index=0),
            WorkUnit(text="Second.", chapter_index=0, sentence_index=1)
        ]

    def test_blank_lines_start_new_chapter(self):
        units = parse_text_units("\n\nA.\nB.\n\n\n  \nC.\n")
        assert [(u.text, u.chapter_index, u.sentence_index) for u in units] == [
            ("A.", 0, 0), ("B.", 0, 1), ("C.", 1, 0)
        ]

    def test_lines_are_trimmed(self):
        assert parse_text_units("   A.  ")[0].text == "A."


class TestLoadUnits:

    def test_txt_file(self, tmp_path):
        path = tmp_path / "book.txt"
        path.write_text("A.\nB.\n", encoding="utf-8")
        assert [u.text for u in load_units(str(path))] == ["A.", "B."]

    def test_json_strings_and_dicts(self, tmp_path):
        path = tmp_path / "book.json"
        path.write_text(json.dumps(["A.", {"text": "B.", "chapter_index": 2, "sentence_index": 7}]), encoding="utf-8")

        assert load_units(str(path)) == [
            WorkUnit(text="A.", chapter_index=0, sentence_index=0),
            WorkUnit(text="B.", chapter_index=2, sentence_index=7)
        ]

    def test_json_must_be_a_list(self, tmp_path):
        path = tmp_path / "book.json"
        path.write_text(json.dumps({"text": "A."}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_units(str(path))

    def test_json_rejects_bad_items(self, tmp_path):
        path = tmp_path / "book.json"
        path.write_text(json.dumps([42]), encoding="utf-8")
        with pytest.raises(ValueError):
            load_units(str(path))


def test_write_translated_text(tmp_path):
    units = parse_text_units("A.\nB.\n\nC.\n")
    output = tmp_path / "out" / "book.txt"

    translated = write_translated_text(str(output), units, {"A.": "Un.", "C.": "Trois."})

    assert translated == 2
    assert output.read_text(encoding="utf-8") == "Un.\nB.\n\nTrois.\n"


def test_unique_output_path(tmp_path):
    path = tmp_path / "book.txt"
    assert get_unique_output_path(str(path)) == str(path)

    path.write_text("x", encoding="utf-8")
    assert get_unique_output_path(str(path)) == str(tmp_path / "book (1).txt")
