"""Per-run helpers shared by the workflow handlers.

A handler wraps each declared step in `run.step(...)`. The step is recorded
on the tracker when the block exits: with the recorder's status and data on
success, or as FAILED with the error text when the block raises. A raising
step aborts the handler through `StepFailedError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from university_agent.integrations.calendar import CalendarProvider
from university_agent.integrations.datastore import DataStore
from university_agent.integrations.ledger import Ledger
from university_agent.integrations.messaging import Messenger
from university_agent.integrations.models import LogEntry, MessageResult, Student
from university_agent.workflow.interpreter import DEFAULT_TARGET_DATE, CommandParams
from university_agent.workflow.state_machine import StepStatus
from university_agent.workflow.tracker import ExecutionContext, ExecutionTracker

logger = logging.getLogger(__name__)

MISSING_PHONE_ERROR = "Student has no phone number on record"


class StepFailedError(RuntimeError):
    """A workflow step raised; the step has already been recorded as FAILED."""

    def __init__(self, step_id: str, cause: BaseException) -> None:
        super().__init__(f"Step {step_id} failed: {cause}")
        self.step_id = step_id
        self.cause = cause


@dataclass(slots=True)
class WorkflowServices:
    """External collaborators available to workflow handlers."""

    data_store: DataStore
    messenger: Messenger
    calendar: CalendarProvider
    ledger: Ledger
    admin_phone: str | None = None
    default_meeting_slot: str = DEFAULT_TARGET_DATE


@dataclass(slots=True)
class StepRecorder:
    step_id: str
    status: StepStatus = StepStatus.COMPLETED
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    def skip(self, reason: str) -> None:
        self.status = StepStatus.SKIPPED
        self.data["reason"] = reason

    def fail(self, error: str) -> None:
        """Mark the step FAILED without aborting the workflow."""
        self.status = StepStatus.FAILED
        self.error = error


@dataclass(slots=True)
class WorkflowRun:
    tracker: ExecutionTracker
    context: ExecutionContext
    services: WorkflowServices
    params: CommandParams = field(default_factory=CommandParams)

    @property
    def execution_id(self) -> str:
        return self.context.execution_id

    def threshold(self, default: float) -> float:
        return self.params.threshold if self.params.threshold is not None else default

    def meeting_slot(self) -> str:
        return self.params.target_date or self.services.default_meeting_slot

    @contextmanager
    def step(self, step_id: str) -> Iterator[StepRecorder]:
        recorder = StepRecorder(step_id=step_id)
        try:
            yield recorder
        except Exception as e:
            self.tracker.log_step(
                self.execution_id,
                step_id,
                StepStatus.FAILED,
                data=recorder.data,
                error=str(e) or e.__class__.__name__,
            )
            raise StepFailedError(step_id, e) from e
        self.tracker.log_step(
            self.execution_id,
            step_id,
            recorder.status,
            data=recorder.data,
            error=recorder.error,
        )

    def notify(self, student: Student, body: str) -> MessageResult:
        if not (student.phone or "").strip():
            logger.warning(
                "Notification skipped",
                extra={"execution_id": self.execution_id, "student_id": student.id, "error": MISSING_PHONE_ERROR},
            )
            return MessageResult(success=False, error=MISSING_PHONE_ERROR)
        return self.services.messenger.send_whatsapp(student.phone or "", body)

    def write_log(self, student: Student, action: str) -> LogEntry:
        return self.services.data_store.insert_log(
            LogEntry(student_hash=str(student.id), action=action)
        )
