"""In-memory workflow execution tracker.

The tracker owns the lifecycle of every workflow run:

    start_execution -> log_step* -> complete_execution

Active executions live in a dict keyed by execution id. Finished executions
move to a bounded, insertion-ordered history (oldest evicted first). Nothing is
persisted: restarting the process starts with an empty tracker.

Steps are appended in call order and never reordered; the proof attached on
completion is computed over exactly that order.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from university_agent.workflow.definitions import WorkflowDefinition, get_workflow
from university_agent.workflow.proof import ExecutionProof, compute_proof_digest, generate_execution_proof
from university_agent.workflow.state_machine import (
    ExecutionStatus,
    IllegalTransitionError,
    StepStatus,
    transition,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY = 1000


class WorkflowNotFoundError(LookupError):
    """Raised when an execution is requested for an unknown workflow."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Workflow not found: {identifier}")
        self.identifier = identifier


class ExecutionNotFoundError(LookupError):
    """Raised when an execution id is neither active nor retained in history."""

    def __init__(self, execution_id: str) -> None:
        super().__init__(f"Execution not found: {execution_id}")
        self.execution_id = execution_id


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class StepLog:
    id: str
    timestamp: str
    status: StepStatus
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    def to_json(self) -> dict[str, object]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "status": self.status.value,
            "data": self.data,
            "error": self.error,
        }


@dataclass(slots=True)
class ExecutionContext:
    execution_id: str
    workflow: WorkflowDefinition
    trigger: str
    start_time: datetime
    status: ExecutionStatus = ExecutionStatus.RUNNING
    steps: list[StepLog] = field(default_factory=list)
    end_time: datetime | None = None
    result: dict[str, Any] | None = None
    proof: ExecutionProof | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def workflow_name(self) -> str:
        return self.workflow.name

    def duration_ms(self, now: datetime | None = None) -> int:
        end = self.end_time or now or _utc_now()
        return max(0, int((end - self.start_time).total_seconds() * 1000))


class StepView(BaseModel):
    id: str
    service: str | None = None
    description: str | None = None
    status: str
    timestamp: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None


class ExecutionView(BaseModel):
    """Dashboard-ready projection of an execution context."""

    execution_id: str
    workflow_id: str
    workflow_name: str
    trigger: str
    status: ExecutionStatus
    start_time: datetime
    end_time: datetime | None = None
    duration_ms: int
    steps: list[StepView] = Field(default_factory=list)
    result: dict[str, Any] | None = None
    proof: dict[str, object] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    is_active: bool = False


class ExecutionMetrics(BaseModel):
    total_executions: int
    active_executions: int
    successful_executions: int
    failed_executions: int
    success_rate: float = Field(description="Percentage of finished executions that completed")
    average_duration_ms: int


class ExecutionTracker:
    """Thread-safe in-memory store of active and historical executions."""

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY) -> None:
        if max_history <= 0:
            raise ValueError("max_history must be a positive integer")
        self._max_history = max_history
        self._lock = threading.Lock()
        self._active: dict[str, ExecutionContext] = {}
        self._history: deque[ExecutionContext] = deque()
        self._history_index: dict[str, ExecutionContext] = {}

    @property
    def max_history(self) -> int:
        return self._max_history

    def _new_execution_id_unlocked(self) -> str:
        while True:
            candidate = f"EXEC_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"
            if candidate not in self._active and candidate not in self._history_index:
                return candidate

    def _require_active_unlocked(self, execution_id: str) -> ExecutionContext:
        context = self._active.get(execution_id)
        if context is not None:
            return context
        if execution_id in self._history_index:
            raise IllegalTransitionError(f"Execution already finished: {execution_id}")
        raise ExecutionNotFoundError(execution_id)

    def _retain_unlocked(self, context: ExecutionContext) -> None:
        self._history.append(context)
        self._history_index[context.execution_id] = context
        while len(self._history) > self._max_history:
            evicted = self._history.popleft()
            self._history_index.pop(evicted.execution_id, None)
            logger.debug("Evicted execution from history", extra={"execution_id": evicted.execution_id})

    def start_execution(
        self,
        workflow_id: str,
        trigger: str = "manual",
        metadata: dict[str, Any] | None = None,
    ) -> ExecutionContext:
        """Open a RUNNING execution for a workflow (looked up by id or name)."""

        workflow = get_workflow(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)

        with self._lock:
            context = ExecutionContext(
                execution_id=self._new_execution_id_unlocked(),
                workflow=workflow,
                trigger=trigger,
                start_time=_utc_now(),
                metadata=dict(metadata or {}),
            )
            self._active[context.execution_id] = context

        logger.info(
            "Started execution",
            extra={
                "execution_id": context.execution_id,
                "workflow_id": workflow.id,
                "trigger": trigger,
            },
        )
        return context

    def log_step(
        self,
        execution_id: str,
        step_id: str,
        status: StepStatus | str = StepStatus.COMPLETED,
        data: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> StepLog:
        """Append a step log to a running execution and return it."""

        step = StepLog(
            id=step_id,
            timestamp=_utc_now().isoformat(),
            status=StepStatus(status),
            data=dict(data or {}),
            error=error,
        )
        with self._lock:
            context = self._require_active_unlocked(execution_id)
            context.steps.append(step)

        log = logger.warning if step.status == StepStatus.FAILED else logger.info
        log(
            "Step recorded",
            extra={
                "execution_id": execution_id,
                "step_id": step_id,
                "status": step.status.value,
            },
        )
        return step

    def complete_execution(self, execution_id: str, result: dict[str, Any]) -> ExecutionContext:
        """Finalize a running execution and move it to history.

        `result["success"]` decides between COMPLETED and FAILED.
        """

        target = ExecutionStatus.COMPLETED if result.get("success") else ExecutionStatus.FAILED
        with self._lock:
            context = self._require_active_unlocked(execution_id)
            context.status = transition(current=context.status, to=target)
            context.end_time = _utc_now()
            context.result = result
            context.proof = generate_execution_proof(s.to_json() for s in context.steps)
            del self._active[execution_id]
            self._retain_unlocked(context)

        logger.info(
            "Execution finished",
            extra={
                "execution_id": execution_id,
                "workflow_id": context.workflow.id,
                "status": context.status.value,
                "duration_ms": context.duration_ms(),
            },
        )
        return context

    def get_context(self, execution_id: str) -> ExecutionContext | None:
        with self._lock:
            return self._active.get(execution_id) or self._history_index.get(execution_id)

    def get_execution_status(self, execution_id: str) -> ExecutionView | None:
        with self._lock:
            active = self._active.get(execution_id)
            if active is not None:
                return self._to_view(active, is_active=True)
            historical = self._history_index.get(execution_id)
            if historical is not None:
                return self._to_view(historical, is_active=False)
        return None

    def get_active_executions(self) -> list[ExecutionView]:
        with self._lock:
            return [self._to_view(c, is_active=True) for c in self._active.values()]

    def get_execution_history(self, limit: int = 50) -> list[ExecutionView]:
        """Newest-first views of the most recent finished executions."""

        if limit <= 0:
            return []
        with self._lock:
            recent = list(self._history)[-limit:]
            return [self._to_view(c, is_active=False) for c in reversed(recent)]

    def step_timeline(self, execution_id: str) -> list[StepView]:
        """Declared workflow steps aligned with what has been recorded so far."""

        with self._lock:
            context = self._active.get(execution_id) or self._history_index.get(execution_id)
            if context is None:
                raise ExecutionNotFoundError(execution_id)
            recorded = {s.id: s for s in context.steps}
            timeline: list[StepView] = []
            for descriptor in context.workflow.steps:
                step = recorded.get(descriptor.id)
                timeline.append(
                    StepView(
                        id=descriptor.id,
                        service=descriptor.service,
                        description=descriptor.description,
                        status="PENDING" if step is None else step.status.value,
                        timestamp=None if step is None else step.timestamp,
                        data={} if step is None else step.data,
                        error=None if step is None else step.error,
                    )
                )
            return timeline

    def verify_proof(self, execution_id: str, proof: str) -> bool:
        """Recompute the proof of a finished execution and compare."""

        with self._lock:
            context = self._history_index.get(execution_id)
            if context is None:
                if execution_id in self._active:
                    return False
                raise ExecutionNotFoundError(execution_id)
            digest, _count = compute_proof_digest(s.to_json() for s in context.steps)
        return digest == proof

    def get_metrics(self) -> ExecutionMetrics:
        with self._lock:
            history = list(self._history)
            active = len(self._active)

        total = len(history)
        successful = sum(1 for c in history if c.status == ExecutionStatus.COMPLETED)
        failed = sum(1 for c in history if c.status == ExecutionStatus.FAILED)
        durations = [c.duration_ms() for c in history if c.end_time is not None]
        average = round(sum(durations) / len(durations)) if durations else 0

        return ExecutionMetrics(
            total_executions=total,
            active_executions=active,
            successful_executions=successful,
            failed_executions=failed,
            success_rate=round(successful / total * 100, 2) if total else 0.0,
            average_duration_ms=average,
        )

    def clear_history(self) -> None:
        with self._lock:
            self._history.clear()
            self._history_index.clear()
        logger.info("Execution history cleared")

    def _to_view(self, context: ExecutionContext, *, is_active: bool) -> ExecutionView:
        workflow = context.workflow
        steps: list[StepView] = []
        for step in context.steps:
            descriptor = workflow.step(step.id)
            steps.append(
                StepView(
                    id=step.id,
                    service=None if descriptor is None else descriptor.service,
                    description=None if descriptor is None else descriptor.description,
                    status=step.status.value,
                    timestamp=step.timestamp,
                    data=step.data,
                    error=step.error,
                )
            )
        return ExecutionView(
            execution_id=context.execution_id,
            workflow_id=workflow.id,
            workflow_name=workflow.name,
            trigger=context.trigger,
            status=context.status,
            start_time=context.start_time,
            end_time=context.end_time,
            duration_ms=context.duration_ms(),
            steps=steps,
            result=context.result,
            proof=None if context.proof is None else context.proof.to_json(),
            metadata=context.metadata,
            is_active=is_active,
        )


def generate_mermaid_diagram(workflow_id: str) -> str | None:
    """Render a workflow's declared steps as a Mermaid `graph TD` diagram."""

    workflow = get_workflow(workflow_id)
    if workflow is None:
        return None

    lines = ["graph TD", f"    Start([{workflow.name}])"]
    for index, step in enumerate(workflow.steps, start=1):
        node = f"Step{index}"
        previous = "Start" if index == 1 else f"Step{index - 1}"
        lines.append(f"    {node}[{step.id}<br/>{step.service}]")
        if step.condition:
            lines.append(f"    {previous} -->|{step.condition}| {node}")
        else:
            lines.append(f"    {previous} --> {node}")
    lines.append(f"    Step{len(workflow.steps)} --> End([Complete])")
    return "\n".join(lines) + "\n"
