"""Unit tests for command interpretation."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from university_agent.llm.provider import LLMProvider
from university_agent.workflow.interpreter import (
    CommandInterpreter,
    build_prompt,
    parse_llm_reply,
    regex_parse,
)


@pytest.mark.parametrize(
    ("command", "workflow_id", "threshold"),
    [
        ("Notify students under 75% attendance", "attendance_low_75", 75),
        ("Alert all students below 60 percent", "attendance_critical_60", 60),
        ("Check attendance", "attendance_low_75", 75),
        ("Escalate attendance issues under 65", "attendance_critical_60", 65),
    ],
)
def test_regex_attendance_commands(command: str, workflow_id: str, threshold: float) -> None:
    parsed = regex_parse(command)

    assert parsed.workflow_id == workflow_id
    assert parsed.params.threshold == threshold
    assert parsed.source == "regex"


def test_regex_keyword_groups() -> None:
    assert regex_parse("Remind students about incomplete assignments").workflow_id == "assignment_tracking"
    assert regex_parse("Run a performance review").workflow_id == "performance_review"


def test_regex_later_keywords_take_precedence() -> None:
    parsed = regex_parse("Review attendance and assignments")

    assert parsed.workflow_id == "performance_review"
    assert parsed.params.threshold == 75


def test_regex_meeting_extraction() -> None:
    parsed = regex_parse("Alert students below 60% and schedule a meeting for next Friday")

    assert parsed.workflow_id == "attendance_critical_60"
    assert parsed.params.schedule_meeting is True
    assert parsed.params.target_date == "next friday"


def test_regex_meeting_defaults_date() -> None:
    parsed = regex_parse("Check attendance and schedule a meeting")

    assert parsed.params.target_date == "Tomorrow 10am"


def test_regex_unrecognized() -> None:
    parsed = regex_parse("What's the weather like?")

    assert parsed.recognized is False
    assert parsed.confidence == 0.0


def test_build_prompt_lists_workflows() -> None:
    prompt = build_prompt('Say "hi"')

    assert "attendance_low_75" in prompt
    assert "User Command: \"Say 'hi'\"" in prompt


def test_parse_llm_reply_extracts_embedded_json() -> None:
    parsed = parse_llm_reply(
        'Sure!\n{"workflowId": "assignment_tracking", "params": {"targetDate": "Friday"}, "confidence": 0.9}'
    )

    assert parsed.workflow_id == "assignment_tracking"
    assert parsed.params.target_date == "Friday"
    assert parsed.confidence == 0.9
    assert parsed.source == "llm"


@pytest.mark.parametrize(
    "reply",
    [
        "no json here",
        "{not json}",
        '{"workflowId": "made_up", "params": {}, "confidence": 0.5}',
        '{"workflowId": "performance_review", "confidence": 7}',
    ],
)
def test_parse_llm_reply_rejects_bad_replies(reply: str) -> None:
    with pytest.raises(ValueError):
        parse_llm_reply(reply)


def test_interpreter_without_llm_uses_regex() -> None:
    interpreter = CommandInterpreter()

    assert interpreter.uses_llm is False
    assert interpreter.interpret("Check attendance").source == "regex"


def test_interpreter_prefers_llm() -> None:
    llm = Mock(spec=LLMProvider)
    llm.generate.return_value = '{"workflowId": "performance_review", "params": {}, "confidence": 0.95}'

    parsed = CommandInterpreter(llm).interpret("How are my students doing?")

    assert parsed.workflow_id == "performance_review"
    assert parsed.source == "llm"
    assert "How are my students doing?" in llm.generate.call_args.args[0]


def test_interpreter_llm_null_workflow_is_not_recognized() -> None:
    llm = Mock(spec=LLMProvider)
    llm.generate.return_value = '{"workflowId": null, "params": {}, "confidence": 0}'

    parsed = CommandInterpreter(llm).interpret("Check attendance")

    assert parsed.recognized is False
    assert parsed.source == "llm"


@pytest.mark.parametrize(
    "failure",
    [RuntimeError("rate limited"), None],
)
def test_interpreter_falls_back_to_regex(failure: Exception | None) -> None:
    llm = Mock(spec=LLMProvider)
    if failure is None:
        llm.generate.return_value = '{"workflowId": "unknown_flow"}'
    else:
        llm.generate.side_effect = failure

    parsed = CommandInterpreter(llm).interpret("Notify students under 70% attendance")

    assert parsed.source == "regex"
    assert parsed.workflow_id == "attendance_low_75"
    assert parsed.params.threshold == 70
