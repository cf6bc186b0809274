"""Unit tests for Translator and the LLM providers."""

import json

import httpx
import pytest

from booktrans.config import TranslationConfig
from booktrans.core.exceptions import ProviderRequestError
from booktrans.core.llm import ContextOverflowError, LLMResponse, create_llm_provider
from booktrans.core.llm.base import LLMProvider
from booktrans.core.llm.providers import OllamaProvider, OpenAICompatibleProvider
from booktrans.core.llm.providers import ollama as ollama_module
from booktrans.core.llm.providers import openai as openai_module
from booktrans.core.translator import Translator


class RecordingProvider(LLMProvider):
    """Returns a fixed answer and remembers what it was asked."""

    def __init__(self, answer=None, error=None):
        super().__init__("recording-model")
        self.answer = answer
        self.error = error
        self.calls = []

    async def generate(self, prompt, timeout=None, system_prompt=None):
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt, "timeout": timeout})
        if self.error:
            raise self.error
        if self.answer is None:
            return None
        return LLMResponse(content=self.answer)


def mock_client_factory(handler):
    """Replacement for LLMProvider._create_client serving requests from handler."""
    return lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestTranslator:

    @pytest.mark.asyncio
    async def test_roles_become_system_and_user_prompts(self):
        provider = RecordingProvider(answer="<TRANSLATION>Bonjour</TRANSLATION>")
        translator = Translator(provider, timeout=30)

        result = await translator.completions([
            {"role": "system", "content": "Be a translator."},
            {"role": "user", "content": "Hello"}
        ])

        assert result == "Bonjour"
        assert provider.calls == [{"prompt": "Hello", "system_prompt": "Be a translator.", "timeout": 30}]

    @pytest.mark.asyncio
    async def test_context_is_appended_to_prompt(self):
        provider = RecordingProvider(answer="Bonjour")
        translator = Translator(provider)

        await translator.completions([{"role": "user", "content": "Hello"}], context="Previous line.")

        call = provider.calls[0]
        assert call["system_prompt"] is None
        assert call["prompt"].startswith("Hello")
        assert call["prompt"].endswith("# CONTEXT\n\nPrevious line.")

    @pytest.mark.asyncio
    async def test_no_response_raises(self):
        translator = Translator(RecordingProvider(answer=None))
        with pytest.raises(ProviderRequestError):
            await translator.completions([{"role": "user", "content": "Hello"}])

    @pytest.mark.asyncio
    async def test_empty_answer_raises(self):
        translator = Translator(RecordingProvider(answer="<think>hmm</think>"))
        with pytest.raises(ProviderRequestError):
            await translator.completions([{"role": "user", "content": "Hello"}])

    @pytest.mark.asyncio
    async def test_context_overflow_becomes_request_error(self):
        translator = Translator(RecordingProvider(error=ContextOverflowError("too long")))
        with pytest.raises(ProviderRequestError, match="too long"):
            await translator.completions([{"role": "user", "content": "Hello"}])

    def test_from_config(self):
        config = TranslationConfig(llm_provider="ollama", model="mistral", timeout=42,
                                   api_endpoint="http://localhost:11434/api/generate")
        translator = Translator.from_config(config)

        assert isinstance(translator.provider, OllamaProvider)
        assert translator.model == "mistral"
        assert translator.timeout == 42


class TestProviderFactory:

    def test_ollama_uses_chat_endpoint(self):
        provider = create_llm_provider("ollama", api_endpoint="http://host:11434/api/generate", model="m")
        assert isinstance(provider, OllamaProvider)
        assert provider.api_endpoint == "http://host:11434/api/chat"

    def test_openai(self):
        provider = create_llm_provider("OpenAI", api_endpoint="http://host/v1/chat/completions",
                                       model="gpt", api_key="key")
        assert isinstance(provider, OpenAICompatibleProvider)
        assert provider.api_key == "key"

    def test_openai_requires_endpoint(self):
        with pytest.raises(ValueError):
            create_llm_provider("openai", model="gpt")

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider"):
            create_llm_provider("carrier-pigeon")


class TestOllamaProvider:

    @pytest.mark.asyncio
    async def test_chat_request_and_usage(self, monkeypatch):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={
                "message": {"role": "assistant", "content": "Bonjour"},
                "prompt_eval_count": 12,
                "eval_count": 3
            })

        provider = OllamaProvider("http://host:11434/api/chat", "qwen3:14b", context_window=2048)
        monkeypatch.setattr(provider, "_create_client", mock_client_factory(handler))

        response = await provider.generate("Hello", system_prompt="Translate.")

        assert response.content == "Bonjour"
        assert response.context_used == 15
        assert response.context_limit == 2048
        payload = json.loads(requests[0].content)
        assert payload["messages"] == [
            {"role": "system", "content": "Translate."},
            {"role": "user", "content": "Hello"}
        ]
        assert payload["stream"] is False
        assert payload["options"] == {"num_ctx": 2048}

    @pytest.mark.asyncio
    async def test_retries_then_gives_up(self, monkeypatch):
        attempts = []

        def handler(request):
            attempts.append(request)
            return httpx.Response(500, text="boom")

        monkeypatch.setattr(ollama_module, "RETRY_DELAY_SECONDS", 0)
        monkeypatch.setattr(ollama_module, "MAX_TRANSLATION_ATTEMPTS", 3)
        provider = OllamaProvider("http://host:11434/api/chat", "m")
        monkeypatch.setattr(provider, "_create_client", mock_client_factory(handler))

        assert await provider.generate("Hello") is None
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_context_overflow(self, monkeypatch):
        def handler(request):
            return httpx.Response(400, text="input length exceeds context window")

        provider = OllamaProvider("http://host:11434/api/chat", "m")
        monkeypatch.setattr(provider, "_create_client", mock_client_factory(handler))

        with pytest.raises(ContextOverflowError):
            await provider.generate("Hello")


class TestOpenAICompatibleProvider:

    @pytest.mark.asyncio
    async def test_request_and_usage(self, monkeypatch):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={
                "choices": [{"message": {"role": "assistant", "content": "Bonjour"}}],
                "usage": {"prompt_tokens": 20, "completion_tokens": 4}
            })

        provider = OpenAICompatibleProvider("http://host/v1/chat/completions", "gpt", api_key="secret")
        monkeypatch.setattr(provider, "_create_client", mock_client_factory(handler))

        response = await provider.generate("Hello", system_prompt="Translate.")

        assert response.content == "Bonjour"
        assert response.prompt_tokens == 20
        assert response.context_used == 24
        assert requests[0].headers["Authorization"] == "Bearer secret"
        assert json.loads(requests[0].content)["model"] == "gpt"

    @pytest.mark.asyncio
    async def test_context_overflow(self, monkeypatch):
        def handler(request):
            return httpx.Response(400, json={"error": {"message": "This model's maximum context length is 4096 tokens"}})

        provider = OpenAICompatibleProvider("http://host/v1/chat/completions", "gpt")
        monkeypatch.setattr(provider, "_create_client", mock_client_factory(handler))

        with pytest.raises(ContextOverflowError):
            await provider.generate("Hello")

    @pytest.mark.asyncio
    async def test_timeouts_give_up(self, monkeypatch):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        monkeypatch.setattr(openai_module, "RETRY_DELAY_SECONDS", 0)
        provider = OpenAICompatibleProvider("http://host/v1/chat/completions", "gpt")
        monkeypatch.setattr(provider, "_create_client", mock_client_factory(handler))

        assert await provider.generate("Hello") is None
