"""Tests for chat model construction."""

from langchain_openai import ChatOpenAI
import pytest

from appforge.exceptions import ConfigurationError
from appforge.generation import LLMFactory
from appforge.generation.llm import OPENROUTER_BASE_URL


class TestLLMFactory:
    def test_openrouter(self, settings, monkeypatch):
        monkeypatch.setenv("OPEN_ROUTER_KEY", "or-key")

        llm = LLMFactory.create_llm(settings)

        assert isinstance(llm, ChatOpenAI)
        assert llm.model_name == settings.llm_model
        assert llm.openai_api_base == OPENROUTER_BASE_URL

    def test_openai(self, settings, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        settings = settings.model_copy(update={"llm_provider": "openai", "llm_model": "gpt-4o"})

        llm = LLMFactory.create_llm(settings)

        assert llm.model_name == "gpt-4o"

    @pytest.mark.parametrize(
        ("provider", "variable"), [("openrouter", "OPEN_ROUTER_KEY"), ("openai", "OPENAI_API_KEY")]
    )
    def test_missing_key(self, settings, monkeypatch, provider, variable):
        monkeypatch.delenv(variable, raising=False)
        settings = settings.model_copy(update={"llm_provider": provider})

        with pytest.raises(ConfigurationError, match=variable):
            LLMFactory.create_llm(settings)
