"""Chat model construction for the generation steps."""

import os

from langchain_openai import ChatOpenAI

from ..config import Settings, get_settings
from ..exceptions import ConfigurationError
from ..logging_config import get_logger

logger = get_logger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class LLMFactory:
    """Creates chat models for the configured provider.

    Supports:
    - OpenRouter (default): key from OPEN_ROUTER_KEY
    - OpenAI: key from OPENAI_API_KEY
    """

    @staticmethod
    def create_llm(settings: Settings | None = None) -> ChatOpenAI:
        """Create a chat model from settings.

        Raises:
            ConfigurationError: If the provider's API key is not set.
        """
        settings = settings or get_settings()
        provider = settings.llm_provider
        logger.info(
            "llm_created",
            provider=provider,
            model=settings.llm_model,
            temperature=settings.llm_temperature,
        )

        if provider == "openrouter":
            api_key = os.environ.get("OPEN_ROUTER_KEY")
            if not api_key:
                raise ConfigurationError("OPEN_ROUTER_KEY environment variable not set")
            return ChatOpenAI(
                base_url=OPENROUTER_BASE_URL,
                api_key=api_key,
                model=settings.llm_model,
                temperature=settings.llm_temperature,
                default_headers={"X-Title": settings.service_name},
            )

        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY environment variable not set")
        return ChatOpenAI(
            api_key=api_key,
            model=settings.llm_model,
            temperature=settings.llm_temperature,
        )
