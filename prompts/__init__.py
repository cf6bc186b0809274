"""
Prompts module for the translation job engine
"""
from prompts.prompts import (
    PromptPair,
    generate_unit_prompt,
    generate_batch_prompt,
)

__all__ = [
    "PromptPair",
    "generate_unit_prompt",
    "generate_batch_prompt",
]
