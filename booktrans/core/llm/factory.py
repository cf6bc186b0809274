"""
LLM provider factory.
"""
import os

from booktrans.config import API_ENDPOINT, DEFAULT_MODEL, OLLAMA_NUM_CTX
from .base import LLMProvider
from .providers import OllamaProvider, OpenAICompatibleProvider


def create_llm_provider(provider_type: str = "ollama", **kwargs) -> LLMProvider:
    """Factory function to create LLM providers"""
    provider_type = (provider_type or "ollama").lower()

    if provider_type == "ollama":
        return OllamaProvider(
            api_endpoint=kwargs.get("api_endpoint") or API_ENDPOINT,
            model=kwargs.get("model") or DEFAULT_MODEL,
            context_window=kwargs.get("context_window") or OLLAMA_NUM_CTX
        )
    elif provider_type == "openai":
        api_key = kwargs.get("api_key") or os.getenv("OPENAI_API_KEY")
        api_endpoint = kwargs.get("api_endpoint")
        if not api_endpoint:
            raise ValueError("OpenAI-compatible provider requires an api_endpoint.")
        return OpenAICompatibleProvider(
            api_endpoint=api_endpoint,
            model=kwargs.get("model") or DEFAULT_MODEL,
            api_key=api_key,
            context_window=kwargs.get("context_window") or OLLAMA_NUM_CTX
        )
    else:
        raise ValueError(f"Unknown provider type: {provider_type}")
