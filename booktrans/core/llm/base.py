"""
Base classes and data structures for LLM providers.

This module defines the abstract base class that all LLM providers must implement,
as well as the LLMResponse data structure.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import httpx

from booktrans.config import REQUEST_TIMEOUT


@dataclass
class LLMResponse:
    """Response from LLM with token usage information"""
    content: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    context_used: int = 0
    context_limit: int = 0


class LLMProvider(ABC):
    """Abstract base class for LLM providers"""

    def __init__(self, model: str):
        """
        Initialize the LLM provider.

        Args:
            model: Model name/identifier
        """
        self.model = model

    def _create_client(self) -> httpx.AsyncClient:
        """
        Create an HTTP client for one request.

        Each job run gets its own event loop, so clients are never kept
        between calls.
        """
        return httpx.AsyncClient(timeout=httpx.Timeout(REQUEST_TIMEOUT))

    @abstractmethod
    async def generate(self, prompt: str, timeout: int = REQUEST_TIMEOUT,
                       system_prompt: Optional[str] = None) -> Optional[LLMResponse]:
        """
        Generate text from prompt.

        Args:
            prompt: The user prompt (content to process)
            timeout: Request timeout in seconds
            system_prompt: Optional system prompt (role/instructions)

        Returns:
            LLMResponse object with content and token usage info, or None if failed
        """
        pass
