"""OpenAI LLM provider implementation."""

import logging
from typing import Any

from openai import OpenAI

from university_agent.core.config import LLMConfig
from university_agent.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = (
    "You are an AI assistant for a university management system. "
    "You answer with a single JSON object and nothing else."
)


class OpenAIProvider(LLMProvider):
    """OpenAI chat-completions provider."""

    def __init__(self, config: LLMConfig, client: OpenAI | None = None) -> None:
        """Initialize the OpenAI provider.

        Args:
            config: LLM configuration.
            client: Optional pre-built client (used by tests).

        Raises:
            ValueError: If API key is not provided.
        """
        if client is None and not config.openai_api_key:
            raise ValueError("OpenAI API key is required")

        self.config = config
        self.client = client or OpenAI(api_key=config.openai_api_key)
        self.model = config.openai_model
        self.temperature = config.openai_temperature

        logger.info("OpenAI provider initialized", extra={"model": self.model})

    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Generate a completion for a single user prompt.

        The prompt is sent with a fixed system message asking for JSON output.
        """
        return self.chat(
            [
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=max_tokens,
            temperature=temperature,
            **kwargs,
        )

    def chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        temp = temperature if temperature is not None else self.temperature

        logger.debug("Generating chat completion", extra={"message_count": len(messages)})

        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,  # type: ignore
            max_tokens=max_tokens,
            temperature=temp,
            **kwargs,
        )

        content = response.choices[0].message.content or ""
        logger.debug("Generated completion", extra={"characters": len(content)})

        return content
