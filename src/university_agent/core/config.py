"""Configuration for the university agent.

Configuration is loaded from environment variables and a local `.env` file
(if present). Each external collaborator has its own settings class so it can
be constructed and tested in isolation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from university_agent.logging import configure_logging


class LLMConfig(BaseSettings):
    """Configuration for the LLM-backed command interpreter."""

    provider: Literal["openai"] = Field(
        default="openai",
        description="LLM provider to use",
    )
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key. Without it commands are parsed with regex only.",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model to use",
    )
    openai_temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="Temperature for command parsing",
    )

    model_config = SettingsConfigDict(
        env_prefix="UNIAGENT_LLM_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def enabled(self) -> bool:
        return bool((self.openai_api_key or "").strip())


class DataStoreConfig(BaseSettings):
    """Configuration for the student/log/assignment data store."""

    backend: Literal["local", "supabase"] = Field(
        default="local",
        description="Data store backend",
    )
    supabase_url: str | None = Field(
        default=None,
        description="Supabase project URL, e.g. https://xyz.supabase.co",
    )
    supabase_key: str | None = Field(
        default=None,
        description="Supabase anon or service key",
    )
    local_path: Path = Field(
        default=Path("agent_state/university"),
        description="Directory holding students.json, logs.json and assignments.json",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout for Supabase requests",
    )

    model_config = SettingsConfigDict(
        env_prefix="UNIAGENT_DATA_",
        env_file=".env",
        extra="ignore",
    )


class MessagingConfig(BaseSettings):
    """Configuration for Twilio WhatsApp messaging."""

    account_sid: str | None = Field(default=None, description="Twilio account SID")
    auth_token: str | None = Field(default=None, description="Twilio auth token")
    whatsapp_from: str | None = Field(
        default=None,
        description="Sender, e.g. 'whatsapp:+14155238886'",
    )
    status_callback_url: str | None = Field(
        default=None,
        description="Optional Twilio status callback URL",
    )
    admin_phone: str | None = Field(
        default=None,
        description="Administrator phone notified about critical cases",
    )
    base_url: str = Field(
        default="https://api.twilio.com/2010-04-01",
        description="Twilio REST API base URL",
    )

    model_config = SettingsConfigDict(
        env_prefix="UNIAGENT_TWILIO_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def enabled(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.whatsapp_from)


class CalendarConfig(BaseSettings):
    """Configuration for meeting scheduling."""

    meet_base_url: str = Field(
        default="https://meet.google.com",
        description="Base URL used for generated meeting links",
    )
    default_slot: str = Field(
        default="Tomorrow 10am",
        description="Meeting time used when a command does not name one",
    )

    model_config = SettingsConfigDict(
        env_prefix="UNIAGENT_CALENDAR_",
        env_file=".env",
        extra="ignore",
    )


class TrackerConfig(BaseSettings):
    """Configuration for the in-memory execution tracker."""

    max_history: int = Field(
        default=1000,
        gt=0,
        description="Maximum number of finished executions retained",
    )

    model_config = SettingsConfigDict(
        env_prefix="UNIAGENT_TRACKER_",
        env_file=".env",
        extra="ignore",
    )


class AgentConfig(BaseSettings):
    """Main configuration for the agent."""

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug logging for the agent's own loggers",
    )

    llm: LLMConfig = Field(default_factory=LLMConfig)
    data: DataStoreConfig = Field(default_factory=DataStoreConfig)
    messaging: MessagingConfig = Field(default_factory=MessagingConfig)
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    tracker: TrackerConfig = Field(default_factory=TrackerConfig)

    model_config = SettingsConfigDict(
        env_prefix="UNIAGENT_",
        env_file=".env",
        extra="ignore",
    )

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        configure_logging(self.log_level, debug=self.debug)
