"""
Ollama provider implementation.

Talks to a local Ollama server through /api/chat with thinking disabled.
"""

from typing import Optional
import asyncio
import json
import httpx

from ..base import LLMProvider, LLMResponse
from ..exceptions import ContextOverflowError

from booktrans.config import (
    API_ENDPOINT,
    DEFAULT_MODEL,
    REQUEST_TIMEOUT,
    OLLAMA_NUM_CTX,
    MAX_TRANSLATION_ATTEMPTS,
    RETRY_DELAY_SECONDS
)
from booktrans.utils.unified_logger import warning


class OllamaProvider(LLMProvider):
    """Ollama API provider - uses /api/chat so the system prompt is honoured"""

    def __init__(self, api_endpoint: str = API_ENDPOINT, model: str = DEFAULT_MODEL,
                 context_window: int = OLLAMA_NUM_CTX):
        super().__init__(model)
        # /api/generate has no message roles
        self.api_endpoint = api_endpoint.replace('/api/generate', '/api/chat')
        self.context_window = context_window

    def build_payload(self, prompt: str, system_prompt: Optional[str] = None) -> dict:
        """Build the /api/chat request body."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        return {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "think": False,
            "options": {"num_ctx": self.context_window}
        }

    async def generate(self, prompt: str, timeout: int = REQUEST_TIMEOUT,
                       system_prompt: Optional[str] = None) -> Optional[LLMResponse]:
        """
        Generate text using the Ollama chat API.

        Args:
            prompt: The user prompt
            timeout: Request timeout in seconds
            system_prompt: Optional system prompt

        Returns:
            LLMResponse or None if every attempt failed
        """
        payload = self.build_payload(prompt, system_prompt)

        async with self._create_client() as client:
            for attempt in range(MAX_TRANSLATION_ATTEMPTS):
                try:
                    response = await client.post(
                        self.api_endpoint,
                        json=payload,
                        timeout=timeout
                    )
                    response.raise_for_status()

                    response_json = response.json()
                    response_text = response_json.get("message", {}).get("content", "")
                    prompt_tokens = response_json.get("prompt_eval_count", 0)
                    completion_tokens = response_json.get("eval_count", 0)

                    return LLMResponse(
                        content=response_text,
                        prompt_tokens=prompt_tokens,
                        completion_tokens=completion_tokens,
                        context_used=prompt_tokens + completion_tokens,
                        context_limit=self.context_window
                    )

                except httpx.TimeoutException as e:
                    warning(f"Ollama API Timeout (attempt {attempt + 1}/{MAX_TRANSLATION_ATTEMPTS}): {e}")
                except httpx.HTTPStatusError as e:
                    error_body = e.response.text[:500] if e.response is not None else ""
                    warning(f"Ollama API HTTP Error (attempt {attempt + 1}/{MAX_TRANSLATION_ATTEMPTS}): {e} {error_body}")

                    if "context" in error_body.lower() and "exceed" in error_body.lower():
                        raise ContextOverflowError(f"Context overflow: {error_body}")
                except (json.JSONDecodeError, httpx.HTTPError) as e:
                    warning(f"Ollama API Error (attempt {attempt + 1}/{MAX_TRANSLATION_ATTEMPTS}): {e}")

                if attempt < MAX_TRANSLATION_ATTEMPTS - 1:
                    await asyncio.sleep(RETRY_DELAY_SECONDS)

        return None
