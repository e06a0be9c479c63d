"""Unit tests for configuration."""

from pathlib import Path

import pytest

from university_agent.core.config import (
    AgentConfig,
    CalendarConfig,
    DataStoreConfig,
    LLMConfig,
    MessagingConfig,
    TrackerConfig,
)


def test_llm_config_defaults() -> None:
    """Test LLM config default values."""
    config = LLMConfig(openai_api_key="test-key")

    assert config.provider == "openai"
    assert config.openai_model == "gpt-4o-mini"
    assert config.openai_temperature == 0.0
    assert config.enabled is True


def test_llm_config_disabled_without_key() -> None:
    assert LLMConfig(openai_api_key="  ").enabled is False
    assert LLMConfig(openai_api_key=None).enabled is False


def test_data_store_config_defaults() -> None:
    config = DataStoreConfig(supabase_url=None, supabase_key=None)

    assert config.backend == "local"
    assert config.local_path == Path("agent_state/university")
    assert config.timeout_seconds == 30.0


def test_messaging_config_requires_all_credentials() -> None:
    assert MessagingConfig(account_sid="AC1", auth_token="t", whatsapp_from=None).enabled is False
    assert MessagingConfig(account_sid="AC1", auth_token="t", whatsapp_from="+1415").enabled is True


def test_calendar_and_tracker_defaults() -> None:
    assert CalendarConfig().default_slot == "Tomorrow 10am"
    assert TrackerConfig().max_history == 1000


def test_tracker_config_rejects_non_positive_history() -> None:
    with pytest.raises(ValueError):
        TrackerConfig(max_history=0)


def test_nested_config_reads_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("UNIAGENT_DATA_BACKEND", "supabase")
    monkeypatch.setenv("UNIAGENT_DATA_SUPABASE_URL", "https://demo.supabase.co")
    monkeypatch.setenv("UNIAGENT_TWILIO_ADMIN_PHONE", "+15551234567")
    monkeypatch.setenv("UNIAGENT_LOG_LEVEL", "WARNING")

    config = AgentConfig()

    assert config.log_level == "WARNING"
    assert config.data.backend == "supabase"
    assert config.data.supabase_url == "https://demo.supabase.co"
    assert config.messaging.admin_phone == "+15551234567"


def test_agent_config_composition() -> None:
    """Test agent config with nested configs."""
    config = AgentConfig(
        log_level="DEBUG",
        debug=True,
    )

    assert config.log_level == "DEBUG"
    assert config.debug is True
    assert isinstance(config.llm, LLMConfig)
    assert isinstance(config.data, DataStoreConfig)
    assert isinstance(config.messaging, MessagingConfig)
    assert isinstance(config.calendar, CalendarConfig)
    assert isinstance(config.tracker, TrackerConfig)
