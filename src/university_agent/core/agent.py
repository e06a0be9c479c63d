"""Top-level agent wiring."""

import logging

from university_agent.core.config import AgentConfig
from university_agent.integrations.calendar import MockCalendar
from university_agent.integrations.datastore import DataStore, create_data_store
from university_agent.integrations.ledger import MockLedger
from university_agent.integrations.messaging import Messenger, create_messenger
from university_agent.llm.factory import LLMFactory
from university_agent.llm.provider import LLMProvider
from university_agent.workflow.executor import WorkflowExecutor, WorkflowRunResult
from university_agent.workflow.interpreter import CommandInterpreter, ParsedCommand
from university_agent.workflow.steps import WorkflowServices
from university_agent.workflow.tracker import ExecutionTracker

logger = logging.getLogger(__name__)


class UniversityAgent:
    """Natural-language front end for the university workflows.

    The agent owns one execution tracker and one set of service adapters for
    its lifetime. Commands are interpreted (LLM first when configured, regex
    otherwise) and dispatched to the matching workflow.
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        *,
        use_llm: bool = True,
        data_store: DataStore | None = None,
        messenger: Messenger | None = None,
    ) -> None:
        """Initialize the agent.

        Args:
            config: Configuration object. If None, loads from environment.
            use_llm: When False, never build an LLM provider.
            data_store: Override the configured data store backend.
            messenger: Override the configured messaging provider.

        Raises:
            ValueError: If the selected data store backend lacks credentials.
        """
        self.config = config or AgentConfig()
        self.config.setup_logging()

        logger.info("Initializing university agent")

        self.llm: LLMProvider | None = LLMFactory.create_optional(self.config.llm) if use_llm else None
        self.interpreter = CommandInterpreter(self.llm)
        self.data_store: DataStore = data_store or create_data_store(self.config.data)
        self.messenger: Messenger = messenger or create_messenger(self.config.messaging)
        self.calendar = MockCalendar(self.config.calendar)
        self.ledger = MockLedger()
        self.tracker = ExecutionTracker(max_history=self.config.tracker.max_history)

        self.services = WorkflowServices(
            data_store=self.data_store,
            messenger=self.messenger,
            calendar=self.calendar,
            ledger=self.ledger,
            admin_phone=self.config.messaging.admin_phone,
            default_meeting_slot=self.config.calendar.default_slot,
        )
        self.executor = WorkflowExecutor(self.tracker, self.services, self.interpreter)

        logger.info("University agent initialized", extra={"llm": self.interpreter.uses_llm})

    def interpret(self, command: str) -> ParsedCommand:
        return self.interpreter.interpret(command)

    def run_command(self, command: str, trigger: str = "natural_language") -> WorkflowRunResult:
        """Interpret and execute a single command."""
        logger.info("Processing command", extra={"command": command})
        return self.executor.run(command, trigger=trigger)
