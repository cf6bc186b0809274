"""
Helpers shared by LLM providers.
"""
from .extraction import TranslationExtractor

__all__ = ['TranslationExtractor']
