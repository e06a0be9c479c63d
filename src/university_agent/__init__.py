"""University Agent.

Maps natural-language commands onto a small set of hard-coded university
workflows and executes them against external services:
- a Postgres-backed data store (students, logs, assignments)
- a messaging provider for WhatsApp notifications
- a calendar provider for meetings
- a ledger stub for audit entries

Every run is traced step by step by the in-memory execution tracker.
"""

__version__ = "0.1.0"

from university_agent.core.config import AgentConfig

__all__ = ["__version__", "AgentConfig"]
