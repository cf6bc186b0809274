"""
OpenAI-compatible provider implementation.

This module provides the OpenAICompatibleProvider class for interacting with
OpenAI API and compatible endpoints (llama.cpp, LM Studio, vLLM, OpenAI, etc.).
"""

from typing import Optional
import asyncio
import json
import httpx

from ..base import LLMProvider, LLMResponse
from ..exceptions import ContextOverflowError

from booktrans.config import (
    REQUEST_TIMEOUT,
    OLLAMA_NUM_CTX,
    MAX_TRANSLATION_ATTEMPTS,
    RETRY_DELAY_SECONDS
)
from booktrans.utils.unified_logger import warning

_CONTEXT_OVERFLOW_KEYWORDS = ["context_length", "maximum context", "token limit",
                              "too many tokens", "reduce the length"]


class OpenAICompatibleProvider(LLMProvider):
    """OpenAI-compatible API provider (works with llama.cpp, LM Studio, vLLM, OpenAI, etc.)"""

    def __init__(self, api_endpoint: str, model: str, api_key: Optional[str] = None,
                 context_window: int = OLLAMA_NUM_CTX):
        super().__init__(model)
        self.api_endpoint = api_endpoint
        self.api_key = api_key
        self.context_window = context_window

    def build_payload(self, prompt: str, system_prompt: Optional[str] = None) -> dict:
        """Build the chat completion request body."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        return {
            "model": self.model,
            "messages": messages,
            "stream": False
        }

    async def generate(self, prompt: str, timeout: int = REQUEST_TIMEOUT,
                       system_prompt: Optional[str] = None) -> Optional[LLMResponse]:
        """
        Generate text using an OpenAI compatible API.

        Args:
            prompt: The user prompt (content to translate)
            timeout: Request timeout in seconds
            system_prompt: Optional system prompt (role/instructions)

        Returns:
            LLMResponse with content and token usage info, or None if failed
        """
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload = self.build_payload(prompt, system_prompt)

        async with self._create_client() as client:
            for attempt in range(MAX_TRANSLATION_ATTEMPTS):
                try:
                    response = await client.post(
                        self.api_endpoint,
                        json=payload,
                        headers=headers,
                        timeout=timeout
                    )
                    response.raise_for_status()

                    response_json = response.json()
                    response_text = response_json.get("choices", [{}])[0].get("message", {}).get("content", "")

                    usage = response_json.get("usage", {})
                    prompt_tokens = usage.get("prompt_tokens", 0)
                    completion_tokens = usage.get("completion_tokens", 0)

                    return LLMResponse(
                        content=response_text,
                        prompt_tokens=prompt_tokens,
                        completion_tokens=completion_tokens,
                        context_used=prompt_tokens + completion_tokens,
                        context_limit=self.context_window
                    )

                except httpx.TimeoutException as e:
                    warning(f"OpenAI-compatible API Timeout (attempt {attempt + 1}/{MAX_TRANSLATION_ATTEMPTS}): {e}")
                except httpx.HTTPStatusError as e:
                    error_body = e.response.text[:500] if e.response is not None else ""
                    error_message = f"{e} - {error_body}" if error_body else str(e)
                    warning(f"OpenAI-compatible API HTTP Error (attempt {attempt + 1}/{MAX_TRANSLATION_ATTEMPTS}): {error_message}")

                    if any(keyword in error_message.lower() for keyword in _CONTEXT_OVERFLOW_KEYWORDS):
                        raise ContextOverflowError(f"Context overflow: {error_message}")
                except (json.JSONDecodeError, httpx.HTTPError) as e:
                    warning(f"OpenAI-compatible API Error (attempt {attempt + 1}/{MAX_TRANSLATION_ATTEMPTS}): {e}")

                if attempt < MAX_TRANSLATION_ATTEMPTS - 1:
                    await asyncio.sleep(RETRY_DELAY_SECONDS)

        return None
