"""Hand-written handlers, one per registered workflow.

Each handler walks its workflow's declared steps in order, records every step
through `run.step(...)`, and returns the summary stored as the execution
result. Per-student delivery failures are counted, not raised.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import Any

from university_agent.integrations.models import Assignment, MessageResult, Student
from university_agent.workflow.definitions import (
    ASSIGNMENT_TRACKING,
    CRITICAL_ATTENDANCE,
    LOW_ATTENDANCE,
    PERFORMANCE_REVIEW,
)
from university_agent.workflow.proof import generate_execution_proof, hash_student_id
from university_agent.workflow.steps import WorkflowRun

LOW_ATTENDANCE_THRESHOLD = 75.0
CRITICAL_ATTENDANCE_THRESHOLD = 65.0
LOW_COMPLETION_RATE = 0.5
REPEAT_DEFAULTER_WARNINGS = 1

ACTION_NOTIFY_LOW_ATTENDANCE = "NOTIFY_LOW_ATTENDANCE"
ACTION_WHATSAPP_FALLBACK = "WHATSAPP_FAILED -> FALLBACK_LOGGED"
ACTION_CRITICAL_INTERVENTION = "CRITICAL_ATTENDANCE_INTERVENTION"
ACTION_ASSIGNMENT_REMINDER = "ASSIGNMENT_REMINDER"
ACTION_PERFORMANCE_REVIEW = "PERFORMANCE_REVIEW_INITIATED"

BAND_CRITICAL = "critical"
BAND_AT_RISK = "at_risk"
BAND_ON_TRACK = "on_track"

Handler = Callable[[WorkflowRun], dict[str, Any]]


def _fmt_pct(value: float) -> str:
    if float(value).is_integer():
        return f"{value:g}%"
    return f"{value}%"


def low_attendance_message(student: Student, threshold: float) -> str:
    return (
        f"Alert: Your attendance is {_fmt_pct(student.attendance)}, which is below the "
        f"{_fmt_pct(threshold)} threshold. Please contact administration."
    )


def critical_attendance_message(student: Student, threshold: float) -> str:
    return (
        f"URGENT: Your attendance is {_fmt_pct(student.attendance)}, which is critically low "
        f"(<{_fmt_pct(threshold)}). An intervention meeting is being scheduled."
    )


def assignment_reminder_message(student: Student, assignments: list[Assignment]) -> str:
    titles = ", ".join(a.title for a in assignments)
    return (
        f"Reminder: {student.name}, you have {len(assignments)} incomplete assignment(s): "
        f"{titles}. Please submit before the deadline."
    )


def _count_sent(outcomes: list[MessageResult]) -> int:
    return sum(1 for o in outcomes if o.success)


def run_low_attendance(run: WorkflowRun) -> dict[str, Any]:
    threshold = run.threshold(LOW_ATTENDANCE_THRESHOLD)
    services = run.services

    with run.step("FETCH_STUDENTS") as step:
        students = services.data_store.students_below(threshold)
        step.data.update(threshold=threshold, fetched=len(students))

    with run.step("LOG_BLOCKCHAIN") as step:
        receipts = {
            str(s.id): services.ledger.log_action(s.id, ACTION_NOTIFY_LOW_ATTENDANCE, run.execution_id)
            for s in students
        }
        step.data.update(entries=len(receipts))

    with run.step("HASH_STUDENT_IDS") as step:
        hashes = {str(s.id): hash_student_id(s.id) for s in students}
        step.data.update(hashed=len(hashes))

    with run.step("FILTER_AT_RISK") as step:
        at_risk = [s for s in students if s.attendance < threshold]
        step.data.update(at_risk=len(at_risk))

    with run.step("SEND_NOTIFICATIONS") as step:
        outcomes = [run.notify(s, low_attendance_message(s, threshold)) for s in at_risk]
        sent = _count_sent(outcomes)
        step.data.update(sent=sent, failed=len(outcomes) - sent)
        if outcomes and sent == 0:
            step.fail("No notifications could be delivered")

        # Repeat defaulters also get an escalation meeting.
        meetings = {
            str(s.id): services.calendar.schedule_meeting(s.name, run.meeting_slot())
            for s in at_risk
            if s.warnings > REPEAT_DEFAULTER_WARNINGS
        }
        step.data.update(meetings_scheduled=sum(1 for m in meetings.values() if m.success))

    with run.step("LOG_DATABASE") as step:
        for student, outcome in zip(at_risk, outcomes):
            if not outcome.success:
                run.write_log(student, ACTION_WHATSAPP_FALLBACK)
            run.write_log(student, ACTION_NOTIFY_LOW_ATTENDANCE)
        step.data.update(logged=len(at_risk))

    with run.step("GENERATE_PROOF") as step:
        proof = generate_execution_proof(s.to_json() for s in run.context.steps)
        step.data.update(proof=proof.proof, step_count=proof.step_count)

    details = [
        {
            "student": student.name,
            "attendance": student.attendance,
            "notified": outcome.success,
            "error": outcome.error,
            "meeting_scheduled": (
                meetings[str(student.id)].meeting_link if str(student.id) in meetings else None
            ),
            "on_chain_tx": receipts[str(student.id)].tx_hash,
        }
        for student, outcome in zip(at_risk, outcomes)
    ]
    first_receipt = next(iter(receipts.values()), None)
    return {
        "action": f"Checked attendance < {_fmt_pct(threshold)}",
        "affected_count": len(at_risk),
        "success_count": sent,
        "failure_count": len(outcomes) - sent,
        "meetings_scheduled": sum(1 for m in meetings.values() if m.success),
        "blockchain_tx_hash": None if first_receipt is None else first_receipt.tx_hash,
        "proof": proof.proof,
        "details": details,
    }


def run_critical_attendance(run: WorkflowRun) -> dict[str, Any]:
    threshold = run.threshold(CRITICAL_ATTENDANCE_THRESHOLD)
    services = run.services

    with run.step("FETCH_CRITICAL_STUDENTS") as step:
        students = services.data_store.students_below(threshold)
        step.data.update(threshold=threshold, fetched=len(students))

    with run.step("LOG_BLOCKCHAIN") as step:
        receipts = [
            services.ledger.log_action(s.id, ACTION_CRITICAL_INTERVENTION, run.execution_id)
            for s in students
        ]
        step.data.update(entries=len(receipts))

    with run.step("HASH_STUDENT_IDS") as step:
        step.data.update(hashed=len({hash_student_id(s.id) for s in students}))

    with run.step("SEND_URGENT_NOTIFICATIONS") as step:
        outcomes = [run.notify(s, critical_attendance_message(s, threshold)) for s in students]
        sent = _count_sent(outcomes)
        step.data.update(sent=sent, failed=len(outcomes) - sent)
        if outcomes and sent == 0:
            step.fail("No urgent notifications could be delivered")

    with run.step("SCHEDULE_MEETINGS") as step:
        slot = run.meeting_slot()
        meetings = [services.calendar.schedule_meeting(s.name, slot) for s in students]
        scheduled = sum(1 for m in meetings if m.success)
        step.data.update(slot=slot, scheduled=scheduled)

    with run.step("NOTIFY_ADMINISTRATORS") as step:
        admin_notified = False
        if not students:
            step.skip("No critical cases")
        elif not (services.admin_phone or "").strip():
            step.skip("No administrator phone configured")
        else:
            names = ", ".join(s.name for s in students)
            result = services.messenger.send_whatsapp(
                services.admin_phone or "",
                f"Critical attendance: {len(students)} student(s) below "
                f"{_fmt_pct(threshold)}: {names}. Intervention meetings scheduled for {slot}.",
            )
            admin_notified = result.success
            if not result.success:
                step.fail(result.error or "Administrator notification failed")
        step.data.update(notified=admin_notified)

    with run.step("LOG_DATABASE") as step:
        for student in students:
            run.write_log(student, ACTION_CRITICAL_INTERVENTION)
        step.data.update(logged=len(students))

    details = [
        {
            "student": student.name,
            "attendance": student.attendance,
            "notified": outcome.success,
            "error": outcome.error,
            "meeting_link": meeting.meeting_link,
            "on_chain_tx": receipt.tx_hash,
        }
        for student, outcome, meeting, receipt in zip(students, outcomes, meetings, receipts)
    ]
    return {
        "action": f"Escalated attendance < {_fmt_pct(threshold)}",
        "critical_count": len(students),
        "meetings_scheduled": scheduled,
        "administrators_notified": 1 if admin_notified else 0,
        "details": details,
    }


def run_assignment_tracking(run: WorkflowRun) -> dict[str, Any]:
    services = run.services

    with run.step("FETCH_ASSIGNMENTS") as step:
        assignments = services.data_store.list_assignments()
        students = {str(s.id): s for s in services.data_store.list_students()}
        step.data.update(assignments=len(assignments), students=len(students))

    with run.step("BLOCKCHAIN_AUDIT") as step:
        audited = sorted({str(a.student_id) for a in assignments})
        for student_id in audited:
            services.ledger.log_action(student_id, ACTION_ASSIGNMENT_REMINDER, run.execution_id)
        step.data.update(entries=len(audited))

    with run.step("IDENTIFY_INCOMPLETE") as step:
        incomplete: dict[str, list[Assignment]] = defaultdict(list)
        for assignment in assignments:
            if assignment.is_incomplete:
                incomplete[str(assignment.student_id)].append(assignment)
        unknown = [sid for sid in incomplete if sid not in students]
        step.data.update(
            incomplete_assignments=sum(len(v) for v in incomplete.values()),
            students=len(incomplete),
            unknown_students=len(unknown),
        )

    with run.step("SEND_REMINDERS") as step:
        reminded: list[tuple[Student, list[Assignment], MessageResult]] = []
        for student_id, pending in incomplete.items():
            student = students.get(student_id)
            if student is None:
                continue
            outcome = run.notify(student, assignment_reminder_message(student, pending))
            reminded.append((student, pending, outcome))
        sent = sum(1 for _s, _p, o in reminded if o.success)
        step.data.update(sent=sent, failed=len(reminded) - sent)
        if reminded and sent == 0:
            step.fail("No reminders could be delivered")

    with run.step("UPDATE_CALENDAR") as step:
        created = 0
        for student, pending, _outcome in reminded:
            for assignment in pending:
                meeting = services.calendar.schedule_meeting(
                    f"{student.name}: {assignment.title} deadline",
                    assignment.due_date or run.meeting_slot(),
                )
                created += 1 if meeting.success else 0
        step.data.update(events_created=created)

    with run.step("LOG_ACTIONS") as step:
        for student, _pending, _outcome in reminded:
            run.write_log(student, ACTION_ASSIGNMENT_REMINDER)
        step.data.update(logged=len(reminded))

    return {
        "action": "Tracked incomplete assignments",
        "incomplete_count": sum(len(v) for v in incomplete.values()),
        "reminders_sent": sent,
        "calendar_events_created": created,
        "details": [
            {
                "student": student.name,
                "incomplete": [a.title for a in pending],
                "notified": outcome.success,
                "error": outcome.error,
            }
            for student, pending, outcome in reminded
        ],
    }


def classify_student(student: Student, assignments: list[Assignment]) -> tuple[str, float]:
    """Return (band, assignment completion rate) for one student."""

    total = sum(a.total for a in assignments)
    completed = sum(min(a.completed, a.total) for a in assignments)
    completion = completed / total if total > 0 else 1.0

    if student.attendance < CRITICAL_ATTENDANCE_THRESHOLD:
        return BAND_CRITICAL, completion
    if student.attendance < LOW_ATTENDANCE_THRESHOLD or completion < LOW_COMPLETION_RATE:
        return BAND_AT_RISK, completion
    return BAND_ON_TRACK, completion


def run_performance_review(run: WorkflowRun) -> dict[str, Any]:
    services = run.services

    with run.step("FETCH_PERFORMANCE_DATA") as step:
        students = services.data_store.list_students()
        by_student: dict[str, list[Assignment]] = defaultdict(list)
        for assignment in services.data_store.list_assignments():
            by_student[str(assignment.student_id)].append(assignment)
        step.data.update(students=len(students))

    with run.step("BLOCKCHAIN_RECORD") as step:
        for student in students:
            services.ledger.log_action(student.id, ACTION_PERFORMANCE_REVIEW, run.execution_id)
        step.data.update(entries=len(students))

    with run.step("ANALYZE_PATTERNS") as step:
        analysis = {str(s.id): classify_student(s, by_student[str(s.id)]) for s in students}
        bands: dict[str, int] = {BAND_CRITICAL: 0, BAND_AT_RISK: 0, BAND_ON_TRACK: 0}
        for band, _completion in analysis.values():
            bands[band] += 1
        step.data.update(bands=bands)

    with run.step("GENERATE_REPORTS") as step:
        reports = []
        for student in students:
            band, completion = analysis[str(student.id)]
            reports.append(
                {
                    "student": student.name,
                    "attendance": student.attendance,
                    "assignment_completion": round(completion * 100, 1),
                    "outstanding_assignments": sum(
                        1 for a in by_student[str(student.id)] if a.is_incomplete
                    ),
                    "band": band,
                }
            )
        step.data.update(report_count=len(reports))

    flagged = [s for s in students if analysis[str(s.id)][0] != BAND_ON_TRACK]

    with run.step("SCHEDULE_REVIEWS") as step:
        slot = run.meeting_slot()
        meetings = [services.calendar.schedule_meeting(s.name, slot) for s in flagged]
        scheduled = sum(1 for m in meetings if m.success)
        step.data.update(slot=slot, scheduled=scheduled)

    with run.step("LOG_REVIEW") as step:
        for student in flagged:
            run.write_log(student, ACTION_PERFORMANCE_REVIEW)
        step.data.update(logged=len(flagged))

    return {
        "action": "Reviewed student performance",
        "students_reviewed": len(students),
        "meetings_scheduled": scheduled,
        "report_count": len(reports),
        "reports": reports,
    }


HANDLERS: dict[str, Handler] = {
    LOW_ATTENDANCE.id: run_low_attendance,
    CRITICAL_ATTENDANCE.id: run_critical_attendance,
    ASSIGNMENT_TRACKING.id: run_assignment_tracking,
    PERFORMANCE_REVIEW.id: run_performance_review,
}
