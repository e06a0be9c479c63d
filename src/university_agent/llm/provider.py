"""Provider interface consumed by the command interpreter."""

from abc import ABC, abstractmethod
from typing import Any


class LLMProvider(ABC):
    """A text-completion backend.

    The interpreter only calls `generate` with a single prompt and expects a
    reply containing one JSON object; `chat` is the lower-level call
    providers build `generate` on.
    """

    @abstractmethod
    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Complete a single user prompt.

        Args:
            prompt: The user prompt.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature; None uses the configured value.
            **kwargs: Provider-specific parameters.

        Returns:
            The raw reply text (may be empty).
        """

    @abstractmethod
    def chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Complete a conversation given as role/content dicts."""
