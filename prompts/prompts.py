from typing import NamedTuple, Sequence

from booktrans.config import (INPUT_TAG_IN, INPUT_TAG_OUT, TRANSLATE_TAG_IN,
                              TRANSLATE_TAG_OUT)
from booktrans.core.batch_parser import format_batch_lines


class PromptPair(NamedTuple):
    """A pair of system and user prompts for LLM translation."""
    system: str
    user: str


# ============================================================================
# SHARED PROMPT SECTIONS
# ============================================================================

def _get_output_format_section(
    translate_tag_in: str,
    translate_tag_out: str,
    input_tag_in: str,
    input_tag_out: str,
    additional_rules: str = "",
    example_format: str = "Your translated text here"
) -> str:
    """
    Generate standardized output format instructions.

    Args:
        translate_tag_in: Opening tag for translation output
        translate_tag_out: Closing tag for translation output
        input_tag_in: Opening tag for input text
        input_tag_out: Closing tag for input text
        additional_rules: Optional additional formatting rules
        example_format: Example text to show in correct format

    Returns:
        str: Formatted output format instructions
    """
    additional_rules_text = f"\n{additional_rules}" if additional_rules else ""

    return f"""# OUTPUT FORMAT

**CRITICAL OUTPUT RULES:**
1. Translate ONLY the text between "{input_tag_in}" and "{input_tag_out}" tags
2. Your response MUST start with {translate_tag_in} and end with {translate_tag_out}
3. Do NOT add explanations, comments, notes, or greetings{additional_rules_text}

**CORRECT format (ONLY this):**
{translate_tag_in}
{example_format}
{translate_tag_out}"""


def _get_custom_instructions_section(custom_instructions: str) -> str:
    if not custom_instructions or not custom_instructions.strip():
        return ""
    return f"""

# ADDITIONAL CUSTOM INSTRUCTIONS

{custom_instructions.strip()}
"""


def _get_system_prompt(source_language: str, target_language: str,
                       custom_instructions: str, output_format_section: str,
                       extra_rules: str = "") -> str:
    return f"""You are a professional {target_language} translator of books.

# CRITICAL: TARGET LANGUAGE IS {target_language.upper()}

You are translating FROM {source_language} TO {target_language}.
Your output must be in {target_language} ONLY.

# TRANSLATION PRINCIPLES

- Translate faithfully and naturally for {target_language} readers
- Keep the tone, register and meaning of the original sentence
- Restructure sentences naturally (avoid word-by-word translation)
- Do not summarize, merge or skip sentences{extra_rules}{_get_custom_instructions_section(custom_instructions)}

{output_format_section}"""


# ============================================================================
# PROMPT BUILDERS
# ============================================================================

def generate_unit_prompt(
    text: str,
    source_language: str = "English",
    target_language: str = "Chinese",
    custom_instructions: str = "",
    translate_tag_in: str = TRANSLATE_TAG_IN,
    translate_tag_out: str = TRANSLATE_TAG_OUT
) -> PromptPair:
    """
    Generate the prompt translating a single sentence.

    Used for one-off lookups and for the per-unit fallback of a failed batch.

    Args:
        text: Sentence to translate
        source_language: Source language
        target_language: Target language
        custom_instructions: Additional custom translation instructions
        translate_tag_in: Opening tag for translation output
        translate_tag_out: Closing tag for translation output

    Returns:
        PromptPair: A named tuple with 'system' and 'user' prompts
    """
    output_format_section = _get_output_format_section(
        translate_tag_in,
        translate_tag_out,
        INPUT_TAG_IN,
        INPUT_TAG_OUT
    )
    system_prompt = _get_system_prompt(source_language, target_language,
                                       custom_instructions, output_format_section)

    user_prompt = f"""# TEXT TO TRANSLATE

{INPUT_TAG_IN}
{text}
{INPUT_TAG_OUT}

Start with {translate_tag_in} and end with {translate_tag_out}. Nothing before or after.

Provide your translation now:"""

    return PromptPair(system=system_prompt.strip(), user=user_prompt.strip())


def generate_batch_prompt(
    texts: Sequence[str],
    source_language: str = "English",
    target_language: str = "Chinese",
    custom_instructions: str = "",
    translate_tag_in: str = TRANSLATE_TAG_IN,
    translate_tag_out: str = TRANSLATE_TAG_OUT
) -> PromptPair:
    """
    Generate the prompt translating a window of sentences in one request.

    Each sentence is sent as "[index] text" (1-based) and must come back
    as "[index] translation" on its own line.

    Args:
        texts: Sentences of the window, in order
        source_language: Source language
        target_language: Target language
        custom_instructions: Additional custom translation instructions
        translate_tag_in: Opening tag for translation output
        translate_tag_out: Closing tag for translation output

    Returns:
        PromptPair: A named tuple with 'system' and 'user' prompts
    """
    batch_additional_rules = ("4. Each sentence has an index marker: [index] text - PRESERVE these markers exactly\n"
                              "5. Output exactly one line per input sentence, in the same order")
    batch_example_format = "[1] translated sentence 1\n[2] translated sentence 2"
    output_format_section = _get_output_format_section(
        translate_tag_in,
        translate_tag_out,
        INPUT_TAG_IN,
        INPUT_TAG_OUT,
        additional_rules=batch_additional_rules,
        example_format=batch_example_format
    )
    system_prompt = _get_system_prompt(
        source_language, target_language, custom_instructions, output_format_section,
        extra_rules="\n- Translate every numbered sentence separately, never join two of them"
    )

    # Join outside the f-string to avoid Python 3.11 backslash issues
    formatted_texts = format_batch_lines(texts)

    user_prompt = f"""# SENTENCES TO TRANSLATE ({len(texts)})

{INPUT_TAG_IN}
{formatted_texts}
{INPUT_TAG_OUT}

REMINDER: Output format must be:
{translate_tag_in}
[1] translated sentence 1
[2] translated sentence 2
{translate_tag_out}

Provide your translation now:"""

    return PromptPair(system=system_prompt.strip(), user=user_prompt.strip())
