"""
LLM Provider Implementations

Providers:
    - ollama: Local Ollama server
    - openai: OpenAI-compatible APIs (OpenAI, llama.cpp, LM Studio, vLLM...)
"""
from .ollama import OllamaProvider
from .openai import OpenAICompatibleProvider

__all__ = ['OllamaProvider', 'OpenAICompatibleProvider']
