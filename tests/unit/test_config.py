"""Unit tests for configuration helpers."""

import argparse

import pytest

from booktrans.config import DEFAULT_BATCH_SIZE, TranslationConfig, validate_batch_size


class TestValidateBatchSize:

    def test_accepts_positive(self):
        assert validate_batch_size(3) == 3
        assert validate_batch_size("4") == 4

    @pytest.mark.parametrize("value", [0, -2])
    def test_rejects_below_one(self, value):
        with pytest.raises(ValueError):
            validate_batch_size(value)


class TestTranslationConfig:

    def test_from_web_request(self):
        config = TranslationConfig.from_web_request({
            "source_language": "English",
            "target_language": "French",
            "model": "mistral",
            "llm_provider": "openai",
            "llm_api_endpoint": "http://host/v1/chat/completions",
            "batch_size": "8"
        })

        assert config.target_language == "French"
        assert config.llm_provider == "openai"
        assert config.api_endpoint == "http://host/v1/chat/completions"
        assert config.batch_size == 8
        assert config.interface_type == "web"

    def test_from_cli_args(self):
        args = argparse.Namespace(source_lang="English", target_lang="German", model="m",
                                  api_endpoint="http://x", provider="ollama", no_color=True)
        config = TranslationConfig.from_cli_args(args)

        assert config.target_language == "German"
        assert config.batch_size == DEFAULT_BATCH_SIZE
        assert config.enable_colors is False
        assert config.interface_type == "cli"

    def test_to_dict_hides_api_key(self):
        data = TranslationConfig(openai_api_key="secret").to_dict()
        assert "openai_api_key" not in data
        assert data["batch_size"] == TranslationConfig().batch_size
