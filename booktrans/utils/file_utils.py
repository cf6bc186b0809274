"""
File utilities for CLI translation jobs

Input files become WorkUnits:
    - .txt: one unit per non-empty line, blank lines separate chapters
    - .json: a list of strings, or of {'text', 'chapter_index', 'sentence_index'}
"""
import json
import os
from pathlib import Path
from typing import Dict, List

from booktrans.core.models import WorkUnit


def get_unique_output_path(output_path):
    """
    Generate a unique output path by adding a number suffix if the file already exists.

    Examples:
        book.txt -> book.txt (if doesn't exist)
        book.txt -> book (1).txt (if book.txt exists)
    """
    path = Path(output_path)
    if not path.exists():
        return output_path

    counter = 1
    while True:
        new_path = path.parent / f"{path.stem} ({counter}){path.suffix}"
        if not new_path.exists():
            return str(new_path)
        counter += 1
        if counter > 9999:
            raise RuntimeError(f"Could not find unique filename after 9999 attempts for: {output_path}")


def parse_text_units(content: str) -> List[WorkUnit]:
    """Split plain text into units: one per line, chapter bumped at each blank-line gap."""
    units = []
    chapter_index = 0
    sentence_index = 0
    previous_blank = False

    for line in content.splitlines():
        text = line.strip()
        if not text:
            previous_blank = True
            continue
        if previous_blank and units:
            chapter_index += 1
            sentence_index = 0
        previous_blank = False
        units.append(WorkUnit(text=text, chapter_index=chapter_index, sentence_index=sentence_index))
        sentence_index += 1

    return units


def parse_json_units(content: str) -> List[WorkUnit]:
    data = json.loads(content)
    if not isinstance(data, list):
        raise ValueError("JSON input must be a list of units")

    units = []
    for position, item in enumerate(data):
        if isinstance(item, str):
            units.append(WorkUnit(text=item, sentence_index=position))
        elif isinstance(item, dict) and isinstance(item.get('text'), str):
            units.append(WorkUnit.from_dict(item))
        else:
            raise ValueError(f"Invalid unit at position {position}")
    return units


def load_units(input_path: str) -> List[WorkUnit]:
    """
    Read work units from a .txt or .json file.

    Raises:
        FileNotFoundError: Missing input
        ValueError: Malformed JSON input
    """
    with open(input_path, 'r', encoding='utf-8') as f:
        content = f.read()

    if input_path.lower().endswith('.json'):
        return parse_json_units(content)
    return parse_text_units(content)


def write_translated_text(output_path: str, units: List[WorkUnit], translations: Dict[str, str]) -> int:
    """
    Write one line per unit (translation, or original when missing), blank line between chapters.

    Returns:
        Number of units written with a translation
    """
    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    translated_count = 0
    lines = []
    previous_chapter = None
    for unit in units:
        if previous_chapter is not None and unit.chapter_index != previous_chapter:
            lines.append("")
        previous_chapter = unit.chapter_index

        translated = translations.get(unit.text)
        if translated:
            translated_count += 1
        lines.append(translated or unit.text)

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write("\n".join(lines) + "\n")
    return translated_count
