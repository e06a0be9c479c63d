"""Core package initialization."""

from university_agent.core.agent import UniversityAgent
from university_agent.core.config import AgentConfig

__all__ = [
    "AgentConfig",
    "UniversityAgent",
]
