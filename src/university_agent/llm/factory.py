"""Factory for creating LLM providers."""

import logging

from university_agent.core.config import LLMConfig
from university_agent.llm.openai_provider import OpenAIProvider
from university_agent.llm.provider import LLMProvider

logger = logging.getLogger(__name__)


class LLMFactory:
    """Factory for creating LLM provider instances."""

    @staticmethod
    def create(config: LLMConfig) -> LLMProvider:
        """Create an LLM provider based on configuration.

        Args:
            config: LLM configuration specifying the provider.

        Returns:
            Configured LLM provider instance.

        Raises:
            ValueError: If provider type is not supported.
        """
        logger.info("Creating LLM provider", extra={"provider": config.provider})

        if config.provider == "openai":
            return OpenAIProvider(config)
        raise ValueError(f"Unsupported LLM provider: {config.provider}")

    @staticmethod
    def create_optional(config: LLMConfig) -> LLMProvider | None:
        """Create a provider only when credentials are configured.

        Returns None when the LLM is disabled, in which case callers parse
        commands with the regex interpreter.
        """
        if not config.enabled:
            logger.warning("No LLM credentials configured; using regex command parsing")
            return None
        return LLMFactory.create(config)
