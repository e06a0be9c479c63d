"""Static workflow definitions.

Each workflow is an ordered list of step descriptors naming the external
service the step talks to. The executor walks these linearly; the tracker uses
them to annotate recorded steps for display.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class StepDescriptor:
    id: str
    service: str
    description: str
    action: str
    condition: str | None = None
    options: dict[str, object] = field(default_factory=dict)

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "id": self.id,
            "service": self.service,
            "description": self.description,
            "action": self.action,
        }
        if self.condition is not None:
            out["condition"] = self.condition
        out.update(self.options)
        return out


@dataclass(frozen=True, slots=True)
class WorkflowOutput:
    type: str
    fields: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class WorkflowDefinition:
    id: str
    name: str
    description: str
    steps: tuple[StepDescriptor, ...]
    output: WorkflowOutput
    trigger: str = "natural_language"

    def step(self, step_id: str) -> StepDescriptor | None:
        return next((s for s in self.steps if s.id == step_id), None)

    def summary(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "step_count": len(self.steps),
        }


LOW_ATTENDANCE = WorkflowDefinition(
    id="attendance_low_75",
    name="Low Attendance Detection & Notification",
    description="Detect students below 75% attendance and send notifications",
    steps=(
        StepDescriptor(
            id="FETCH_STUDENTS",
            service="Supabase",
            description="Fetch all student records from database",
            action="database_query",
            options={"query": "SELECT * FROM students WHERE attendance < 75"},
        ),
        StepDescriptor(
            id="LOG_BLOCKCHAIN",
            service="Ethereum",
            description="Emit immutable audit event on-chain",
            action="emit_event",
            options={"contract": "WorkflowLog"},
        ),
        StepDescriptor(
            id="HASH_STUDENT_IDS",
            service="Weilliptic",
            description="Generate privacy-preserving hashes for student IDs",
            action="encryption",
            options={"algorithm": "SHA-256"},
        ),
        StepDescriptor(
            id="FILTER_AT_RISK",
            service="Logic",
            description="Filter students at risk",
            action="filter",
            condition="attendance < 75",
        ),
        StepDescriptor(
            id="SEND_NOTIFICATIONS",
            service="Twilio",
            description="Send WhatsApp notifications to students",
            action="send_message",
            options={"parallel": True},
        ),
        StepDescriptor(
            id="LOG_DATABASE",
            service="Supabase",
            description="Log notification action to database",
            action="database_insert",
            options={"table": "logs"},
        ),
        StepDescriptor(
            id="GENERATE_PROOF",
            service="Weilliptic",
            description="Generate cryptographic execution proof",
            action="generate_proof",
        ),
    ),
    output=WorkflowOutput(
        type="WorkflowExecutionSummary",
        fields=(
            "execution_id",
            "affected_count",
            "success_count",
            "failure_count",
            "blockchain_tx_hash",
            "proof",
        ),
    ),
)

CRITICAL_ATTENDANCE = WorkflowDefinition(
    id="attendance_critical_60",
    name="Critical Attendance Intervention",
    description="Handle students below 65% attendance with escalated intervention",
    steps=(
        StepDescriptor(
            id="FETCH_CRITICAL_STUDENTS",
            service="Supabase",
            description="Fetch students with critical attendance",
            action="database_query",
            options={"query": "SELECT * FROM students WHERE attendance < 65"},
        ),
        StepDescriptor(
            id="LOG_BLOCKCHAIN",
            service="Ethereum",
            description="Record intervention on blockchain",
            action="emit_event",
        ),
        StepDescriptor(
            id="HASH_STUDENT_IDS",
            service="Weilliptic",
            description="Generate privacy hashes",
            action="encryption",
        ),
        StepDescriptor(
            id="SEND_URGENT_NOTIFICATIONS",
            service="Twilio",
            description="Send urgent WhatsApp notifications",
            action="send_message",
            options={"priority": "high"},
        ),
        StepDescriptor(
            id="SCHEDULE_MEETINGS",
            service="GoogleCalendar",
            description="Schedule intervention meetings",
            action="create_event",
            options={"parallel": True},
        ),
        StepDescriptor(
            id="NOTIFY_ADMINISTRATORS",
            service="Twilio",
            description="Alert administrators about critical cases",
            action="send_message",
        ),
        StepDescriptor(
            id="LOG_DATABASE",
            service="Supabase",
            description="Log intervention action",
            action="database_insert",
        ),
    ),
    output=WorkflowOutput(
        type="InterventionSummary",
        fields=(
            "execution_id",
            "critical_count",
            "meetings_scheduled",
            "administrators_notified",
        ),
    ),
)

ASSIGNMENT_TRACKING = WorkflowDefinition(
    id="assignment_tracking",
    name="Assignment Completion Tracking",
    description="Track and notify students with incomplete assignments",
    steps=(
        StepDescriptor(
            id="FETCH_ASSIGNMENTS",
            service="Supabase",
            description="Fetch assignment completion data",
            action="database_query",
        ),
        StepDescriptor(
            id="BLOCKCHAIN_AUDIT",
            service="Ethereum",
            description="Create audit trail",
            action="emit_event",
        ),
        StepDescriptor(
            id="IDENTIFY_INCOMPLETE",
            service="Logic",
            description="Identify students with incomplete work",
            action="filter",
            condition="completed < total",
        ),
        StepDescriptor(
            id="SEND_REMINDERS",
            service="Twilio",
            description="Send assignment reminders",
            action="send_message",
        ),
        StepDescriptor(
            id="UPDATE_CALENDAR",
            service="GoogleCalendar",
            description="Add deadline reminders to calendars",
            action="create_event",
        ),
        StepDescriptor(
            id="LOG_ACTIONS",
            service="Supabase",
            description="Log reminder actions",
            action="database_insert",
        ),
    ),
    output=WorkflowOutput(
        type="AssignmentSummary",
        fields=("execution_id", "reminders_sent", "calendar_events_created"),
    ),
)

PERFORMANCE_REVIEW = WorkflowDefinition(
    id="performance_review",
    name="Student Performance Review",
    description="Comprehensive student performance analysis and reporting",
    steps=(
        StepDescriptor(
            id="FETCH_PERFORMANCE_DATA",
            service="Supabase",
            description="Gather all performance metrics",
            action="database_query",
        ),
        StepDescriptor(
            id="BLOCKCHAIN_RECORD",
            service="Ethereum",
            description="Immutable performance record",
            action="emit_event",
        ),
        StepDescriptor(
            id="ANALYZE_PATTERNS",
            service="Logic",
            description="Identify performance patterns and trends",
            action="analysis",
        ),
        StepDescriptor(
            id="GENERATE_REPORTS",
            service="Logic",
            description="Create performance reports",
            action="generate_report",
        ),
        StepDescriptor(
            id="SCHEDULE_REVIEWS",
            service="GoogleCalendar",
            description="Schedule performance review meetings",
            action="create_event",
        ),
        StepDescriptor(
            id="LOG_REVIEW",
            service="Supabase",
            description="Record review initiation",
            action="database_insert",
        ),
    ),
    output=WorkflowOutput(
        type="PerformanceReviewSummary",
        fields=("execution_id", "students_reviewed", "meetings_scheduled", "report_count"),
    ),
)

WORKFLOWS: tuple[WorkflowDefinition, ...] = (
    LOW_ATTENDANCE,
    CRITICAL_ATTENDANCE,
    ASSIGNMENT_TRACKING,
    PERFORMANCE_REVIEW,
)


def get_workflow(identifier: str) -> WorkflowDefinition | None:
    """Look a workflow up by id or by display name."""

    return next((w for w in WORKFLOWS if identifier in (w.id, w.name)), None)


def list_workflows() -> list[dict[str, object]]:
    return [w.summary() for w in WORKFLOWS]


def describe_workflows_for_prompt() -> list[dict[str, object]]:
    """Catalogue handed to the LLM when mapping a command to a workflow."""

    return [
        {
            "id": w.id,
            "name": w.name,
            "description": w.description,
            "steps": [s.id for s in w.steps],
        }
        for w in WORKFLOWS
    ]
