"""
Translation extraction from LLM responses.

Strips reasoning blocks emitted by "thinking" models and unwraps the
optional translation tags, so callers get the bare translated text.
"""

import re
from typing import Optional


class TranslationExtractor:
    """
    Extracts translation text from LLM responses.

    Handles:
        - Removal of <think>...</think> blocks (and orphan closing tags)
        - Extraction between custom tags (e.g., <TRANSLATION>...</TRANSLATION>)
        - Untagged answers, returned as-is after trimming

    Example:
        >>> extractor = TranslationExtractor("<TRANSLATION>", "</TRANSLATION>")
        >>> extractor.extract("<think>reasoning</think><TRANSLATION>Bonjour</TRANSLATION>")
        'Bonjour'
        >>> extractor.extract("  Bonjour ")
        'Bonjour'
    """

    def __init__(self, tag_in: str, tag_out: str):
        """
        Initialize the extractor with custom tags.

        Args:
            tag_in: Opening tag (e.g., "<TRANSLATION>")
            tag_out: Closing tag (e.g., "</TRANSLATION>")
        """
        self._tag_in = tag_in
        self._tag_out = tag_out
        self._compiled_regex = re.compile(
            rf"{re.escape(tag_in)}(.*?){re.escape(tag_out)}",
            re.DOTALL
        )

    def extract(self, response: Optional[str]) -> Optional[str]:
        """
        Extract translation from a raw response.

        Args:
            response: Raw LLM response text

        Returns:
            Translation text, or None for an empty response
        """
        if not response:
            return None

        response = self._remove_think_blocks(response.strip()).strip()

        match = self._compiled_regex.search(response)
        if match:
            response = match.group(1).strip()

        return response or None

    def _remove_think_blocks(self, response: str) -> str:
        """
        Remove all <think>...</think> blocks from response.

        Args:
            response: Text potentially containing think blocks

        Returns:
            Text with think blocks removed
        """
        # Complete <think>...</think> blocks
        response = re.sub(r'<think>.*?</think>', '', response, flags=re.DOTALL | re.IGNORECASE)

        # Orphan closing tag (server truncated the opening one):
        # everything up to and including </think> is reasoning
        response = re.sub(r'^.*?</think>\s*', '', response, flags=re.DOTALL | re.IGNORECASE)

        return response
