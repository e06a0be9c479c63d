"""LLM providers used to interpret natural-language commands."""

from university_agent.llm.factory import LLMFactory
from university_agent.llm.openai_provider import OpenAIProvider
from university_agent.llm.provider import LLMProvider

__all__ = [
    "LLMFactory",
    "LLMProvider",
    "OpenAIProvider",
]
