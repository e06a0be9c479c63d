"""Test configuration and fixtures."""

import logging
from collections.abc import Iterator
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
from university_agent.integrations.calendar import MockCalendar
from university_agent.integrations.datastore import LocalDataStore
from university_agent.integrations.ledger import MockLedger
from university_agent.integrations.messaging import MockMessenger
from university_agent.integrations.models import Assignment, Student
from university_agent.workflow.steps import WorkflowServices
from university_agent.workflow.tracker import ExecutionTracker

STUDENTS = [
    Student(id=1, name="Alice Smith", phone="+15550000001", attendance=80),
    Student(id=2, name="Bob Jones", phone="+15550000002", attendance=70),
    Student(id=3, name="Carol White", phone=None, attendance=72),
    Student(id=4, name="Dan Brown", phone="+15550000004", attendance=55),
]

ASSIGNMENTS = [
    Assignment(id=1, student_id=1, title="Essay", completed=1, total=1),
    Assignment(id=2, student_id=1, title="Quiz", completed=1, total=2),
    Assignment(id=3, student_id=2, title="Lab Report", completed=0, total=1, due_date="Friday 5pm"),
    Assignment(id=4, student_id=4, title="Project", completed=1, total=3),
]


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """Undo handlers installed by configure_logging during a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Provide a temporary data directory."""
    data_dir = tmp_path / "university"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def data_store(data_dir: Path) -> LocalDataStore:
    """Provide a local data store seeded with four students."""
    store = LocalDataStore(data_dir)
    store.seed(students=STUDENTS, assignments=ASSIGNMENTS)
    return store


@pytest.fixture
def messenger() -> MockMessenger:
    return MockMessenger()


@pytest.fixture
def calendar() -> MockCalendar:
    return MockCalendar()


@pytest.fixture
def ledger() -> MockLedger:
    return MockLedger()


@pytest.fixture
def tracker() -> ExecutionTracker:
    return ExecutionTracker(max_history=10)


@pytest.fixture
def services(
    data_store: LocalDataStore,
    messenger: MockMessenger,
    calendar: MockCalendar,
    ledger: MockLedger,
) -> WorkflowServices:
    """Provide workflow services wired to in-memory/local adapters."""
    return WorkflowServices(
        data_store=data_store,
        messenger=messenger,
        calendar=calendar,
        ledger=ledger,
    )


@pytest.fixture
def agent_config(data_dir: Path) -> AgentConfig:
    """Provide an agent configuration that never reaches hosted services."""
    return AgentConfig(
        log_level="DEBUG",
        debug=True,
        llm=LLMConfig(openai_api_key=None),
        data=DataStoreConfig(backend="local", local_path=data_dir),
        messaging=MessagingConfig(account_sid=None, auth_token=None, whatsapp_from=None),
        calendar=CalendarConfig(),
        tracker=TrackerConfig(max_history=5),
    )
