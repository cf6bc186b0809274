"""
LLM provider layer: base class, concrete providers and factory.
"""
from .base import LLMProvider, LLMResponse
from .exceptions import ContextOverflowError
from .factory import create_llm_provider

__all__ = ['LLMProvider', 'LLMResponse', 'ContextOverflowError', 'create_llm_provider']
