"""
Indexed line format for batch (multi-unit) requests.

A window of N texts is sent as N lines "[1] text", "[2] text", ... and the
provider is expected to echo one "[i] translation" line per input.
"""

import re
from typing import Dict, List, Sequence

_INDEXED_LINE = re.compile(r'^\[(\d+)\]\s*(.+)')


def format_batch_lines(texts: Sequence[str]) -> str:
    """Number texts from 1 and join them one per line."""
    return "\n".join(f"[{i}] {text}" for i, text in enumerate(texts, start=1))


def parse_indexed_lines(response: str, window_size: int) -> Dict[int, str]:
    """
    Parse a batch answer into translations keyed by window position.

    Lines without a leading bracketed index, and indices outside
    1..window_size, are ignored. When an index repeats, the last line wins.

    Args:
        response: Translator output for the whole window
        window_size: Number of units that were sent

    Returns:
        Mapping 0-based window position -> translated text (non-empty)
    """
    results: Dict[int, str] = {}
    if not response:
        return results

    for line in response.splitlines():
        match = _INDEXED_LINE.match(line.strip())
        if not match:
            continue
        index = int(match.group(1))
        if 1 <= index <= window_size:
            text = match.group(2).strip()
            if text:
                results[index - 1] = text
    return results


def missing_positions(parsed: Dict[int, str], window_size: int) -> List[int]:
    """0-based positions of the window that got no translation."""
    return [i for i in range(window_size) if i not in parsed]
