"""
Translator capability on top of an LLM provider.

The job engine only ever talks chat messages to a Translator; the provider
behind it (Ollama, OpenAI-compatible server, or a test double) stays opaque.
"""

import time
from typing import Dict, List, Optional

from booktrans.config import REQUEST_TIMEOUT, TRANSLATE_TAG_IN, TRANSLATE_TAG_OUT, TranslationConfig
from booktrans.core.exceptions import ProviderRequestError
from booktrans.core.llm import LLMProvider, ContextOverflowError, create_llm_provider
from booktrans.core.llm.utils import TranslationExtractor
from booktrans.utils.unified_logger import debug, LogType

Message = Dict[str, str]


class Translator:
    """
    Sends prompt messages to a provider and returns the extracted answer.
    """

    def __init__(self, provider: LLMProvider, timeout: int = REQUEST_TIMEOUT):
        self.provider = provider
        self.timeout = timeout
        self._extractor = TranslationExtractor(TRANSLATE_TAG_IN, TRANSLATE_TAG_OUT)

    @classmethod
    def from_config(cls, config: TranslationConfig) -> 'Translator':
        """Build a Translator with the provider described by config."""
        provider = create_llm_provider(
            config.llm_provider,
            api_endpoint=config.api_endpoint,
            model=config.model,
            api_key=config.openai_api_key,
            context_window=config.context_window
        )
        return cls(provider, timeout=config.timeout)

    @property
    def model(self) -> str:
        return self.provider.model

    async def completions(self, messages: List[Message], context: str = "") -> str:
        """
        Run one chat completion.

        System messages form the system prompt, user messages the prompt.
        A non-empty context is appended to the prompt as extra reference text.

        Args:
            messages: List of {'role': ..., 'content': ...}
            context: Optional surrounding text for the provider

        Returns:
            Translated text with reasoning blocks and output tags removed

        Raises:
            ProviderRequestError: When the provider gives no usable answer
        """
        system_prompt = "\n\n".join(m['content'] for m in messages if m.get('role') == 'system') or None
        prompt = "\n\n".join(m['content'] for m in messages if m.get('role') != 'system')
        if context and context.strip():
            prompt = f"{prompt}\n\n# CONTEXT\n\n{context.strip()}"

        debug("LLM request", LogType.LLM_REQUEST, {
            'model': self.model,
            'system_prompt': system_prompt,
            'user_prompt': prompt
        })

        start_time = time.time()
        try:
            response = await self.provider.generate(prompt, timeout=self.timeout, system_prompt=system_prompt)
        except ContextOverflowError as e:
            raise ProviderRequestError(str(e)) from e

        if response is None:
            raise ProviderRequestError(f"No response from model {self.model}")

        debug("LLM response", LogType.LLM_RESPONSE, {
            'execution_time': time.time() - start_time,
            'response': response.content
        })

        translated: Optional[str] = self._extractor.extract(response.content)
        if not translated:
            raise ProviderRequestError(f"Empty answer from model {self.model}")
        return translated
