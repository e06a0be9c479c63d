"""Run workflows end to end: interpret, track, dispatch, complete."""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel

from university_agent.workflow.definitions import get_workflow
from university_agent.workflow.handlers import HANDLERS
from university_agent.workflow.interpreter import CommandInterpreter, CommandParams, ParsedCommand
from university_agent.workflow.steps import StepFailedError, WorkflowRun, WorkflowServices
from university_agent.workflow.tracker import (
    ExecutionTracker,
    ExecutionView,
    WorkflowNotFoundError,
)

logger = logging.getLogger(__name__)

NOT_RECOGNIZED_MESSAGE = "Command not recognized"


class WorkflowRunResult(BaseModel):
    status: Literal["success", "failed", "unknown"]
    message: str
    workflow_id: str | None = None
    workflow_name: str | None = None
    execution_id: str | None = None
    parsed: ParsedCommand | None = None
    summary: dict[str, Any] | None = None
    error: str | None = None
    execution: ExecutionView | None = None


class WorkflowExecutor:
    """Dispatch interpreted commands to the matching workflow handler."""

    def __init__(
        self,
        tracker: ExecutionTracker,
        services: WorkflowServices,
        interpreter: CommandInterpreter | None = None,
    ) -> None:
        self.tracker = tracker
        self.services = services
        self.interpreter = interpreter or CommandInterpreter()

    def run(self, command: str, trigger: str = "natural_language") -> WorkflowRunResult:
        """Interpret a free-text command and execute the workflow it names."""

        parsed = self.interpreter.interpret(command)
        if not parsed.recognized:
            logger.info("Command not recognized", extra={"command": command})
            return WorkflowRunResult(status="unknown", message=NOT_RECOGNIZED_MESSAGE, parsed=parsed)

        result = self.execute(
            parsed.workflow_id or "",
            parsed.params,
            trigger=trigger,
            metadata={"command": command, "confidence": parsed.confidence, "source": parsed.source},
        )
        result.parsed = parsed
        return result

    def execute(
        self,
        workflow_id: str,
        params: CommandParams | None = None,
        trigger: str = "manual",
        metadata: dict[str, Any] | None = None,
    ) -> WorkflowRunResult:
        """Execute a registered workflow directly.

        Raises:
            WorkflowNotFoundError: If the workflow id (or name) is unknown.
        """
        workflow = get_workflow(workflow_id)
        if workflow is None or workflow.id not in HANDLERS:
            raise WorkflowNotFoundError(workflow_id)

        params = params or CommandParams()
        context = self.tracker.start_execution(
            workflow.id,
            trigger=trigger,
            metadata={**(metadata or {}), "params": params.model_dump(exclude_none=True)},
        )
        run = WorkflowRun(tracker=self.tracker, context=context, services=self.services, params=params)

        try:
            summary = HANDLERS[workflow.id](run)
        except StepFailedError as e:
            logger.exception(
                "Workflow step failed",
                extra={"execution_id": context.execution_id, "workflow_id": workflow.id, "step_id": e.step_id},
            )
            error = str(e.cause) or e.cause.__class__.__name__
            self.tracker.complete_execution(
                context.execution_id,
                {"success": False, "error": error, "failed_step": e.step_id},
            )
            return self._result("failed", f"{workflow.name} failed at {e.step_id}", run, error=error)
        except Exception as e:
            logger.exception(
                "Workflow failed",
                extra={"execution_id": context.execution_id, "workflow_id": workflow.id},
            )
            error = str(e) or e.__class__.__name__
            self.tracker.complete_execution(context.execution_id, {"success": False, "error": error})
            return self._result("failed", f"{workflow.name} failed", run, error=error)

        self.tracker.complete_execution(context.execution_id, {"success": True, **summary})
        return self._result("success", f"{workflow.name} completed", run, summary=summary)

    def _result(
        self,
        status: Literal["success", "failed"],
        message: str,
        run: WorkflowRun,
        *,
        summary: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> WorkflowRunResult:
        return WorkflowRunResult(
            status=status,
            message=message,
            workflow_id=run.context.workflow.id,
            workflow_name=run.context.workflow_name,
            execution_id=run.execution_id,
            summary=summary,
            error=error,
            execution=self.tracker.get_execution_status(run.execution_id),
        )
