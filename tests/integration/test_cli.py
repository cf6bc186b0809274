"""Integration tests for the translate.py command-line interface."""

import pytest

import translate
from booktrans.core.translator import Translator
from booktrans.persistence import ContentCache
from conftest import fake_translation


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "cli.db")


@pytest.fixture
def scripted_translator(monkeypatch, provider):
    """Make every Translator built from CLI options use the scripted provider."""
    monkeypatch.setattr(Translator, "from_config", classmethod(lambda cls, config: cls(provider)))
    return provider


def _seed(db_path, owner_id, pairs):
    cache = ContentCache(db_path)
    for original, translated in pairs:
        cache.put(owner_id, original, translated)
    cache.close()


class TestRun:

    def test_translates_file_and_writes_output(self, tmp_path, db_path, scripted_translator):
        source = tmp_path / "novel.txt"
        source.write_text("A.\nB.\n\nC.\n", encoding="utf-8")
        output = tmp_path / "novel_fr.txt"

        exit_code = translate.main(["--db", db_path, "--no-color", "run", "-i", str(source),
                                    "-o", str(output), "-bs", "10"])

        assert exit_code == 0
        assert scripted_translator.batch_calls == [["A.", "B.", "C."]]
        assert output.read_text(encoding="utf-8") == (
            f"{fake_translation('A.')}\n{fake_translation('B.')}\n\n{fake_translation('C.')}\n"
        )

    def test_second_run_reuses_cache(self, tmp_path, db_path, scripted_translator):
        source = tmp_path / "novel.txt"
        source.write_text("A.\nB.\n", encoding="utf-8")
        _seed(db_path, "novel", [("A.", "Un."), ("B.", "Deux.")])

        exit_code = translate.main(["--db", db_path, "run", "-i", str(source)])

        assert exit_code == 0
        assert scripted_translator.batch_calls == []

    def test_missing_input_fails(self, tmp_path, db_path, scripted_translator):
        assert translate.main(["--db", db_path, "run", "-i", str(tmp_path / "missing.txt")]) == 1


class TestCacheCommands:

    def test_stats(self, db_path, capsys):
        _seed(db_path, "book1", [("A.", "Un."), ("B.", "Deux.")])

        assert translate.main(["--db", db_path, "stats"]) == 0
        out = capsys.readouterr().out
        assert "Cached translations: 2" in out
        assert "Owners: 1" in out

    def test_delete_and_clear(self, db_path, capsys):
        _seed(db_path, "book1", [("A.", "Un.")])
        _seed(db_path, "book2", [("A.", "Un."), ("B.", "Deux.")])

        assert translate.main(["--db", db_path, "delete", "--owner", "book1"]) == 0
        assert "Deleted 1 cached translations for book1" in capsys.readouterr().out

        assert translate.main(["--db", db_path, "clear"]) == 0
        assert "Deleted 2 cached translations" in capsys.readouterr().out

    def test_lookup(self, db_path, capsys, scripted_translator):
        _seed(db_path, "book1", [("A.", "Un.")])

        assert translate.main(["--db", db_path, "lookup", "--owner", "book1", "A."]) == 0
        assert capsys.readouterr().out.strip() == "Un."

        assert translate.main(["--db", db_path, "lookup", "--owner", "book1", "B."]) == 1
        assert "Not cached" in capsys.readouterr().out

        assert translate.main(["--db", db_path, "lookup", "--owner", "book1", "--translate", "B."]) == 0
        assert capsys.readouterr().out.strip() == fake_translation("B.")
        assert scripted_translator.unit_calls == ["B."]
