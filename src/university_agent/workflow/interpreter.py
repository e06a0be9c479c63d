"""Map a free-text command onto a workflow id and parameters.

The regex interpreter is deterministic and always available. When an LLM
provider is configured it is asked first; any provider failure, unparsable
reply, or unknown workflow id falls back to the regex result.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from university_agent.llm.provider import LLMProvider
from university_agent.workflow.definitions import (
    ASSIGNMENT_TRACKING,
    CRITICAL_ATTENDANCE,
    LOW_ATTENDANCE,
    PERFORMANCE_REVIEW,
    describe_workflows_for_prompt,
    get_workflow,
)

logger = logging.getLogger(__name__)

DEFAULT_TARGET_DATE = "Tomorrow 10am"
CRITICAL_THRESHOLD_CUTOFF = 65
LOW_ATTENDANCE_DEFAULT = 75

_THRESHOLD_RE = re.compile(r"(?:notify|flag|alert|check).*students.*(?:under|below|<)\s*(\d+)", re.IGNORECASE)
_DATE_RE = re.compile(
    r"(?:for|on|at)\s+((?:next\s+)?(?:monday|tuesday|wednesday|thursday|friday|saturday|sunday"
    r"|tomorrow|today)(?:\s+at\s+\d+(?:am|pm)?)?)",
    re.IGNORECASE,
)
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)

_PROMPT_TEMPLATE = """\
Analyze the following user command and map it to one of the available workflows.

Available Workflows:
{workflows}

User Command: "{command}"

Extract any scheduling information if present (e.g., "next Friday", "tomorrow at 2pm").
Default to "{default_date}" if a meeting is implied but no time is specified.

Return ONLY a JSON object with the following structure:
{{
  "workflowId": "the_id_of_the_matched_workflow",
  "params": {{
    "threshold": 75,
    "targetDate": "human readable date string",
    "scheduleMeeting": true
  }},
  "confidence": 0.95
}}

If no workflow matches, return:
{{"workflowId": null, "params": {{}}, "confidence": 0}}
"""


class CommandParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    threshold: float | None = None
    schedule_meeting: bool | None = Field(default=None, alias="scheduleMeeting")
    target_date: str | None = Field(default=None, alias="targetDate")


class ParsedCommand(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    workflow_id: str | None = Field(default=None, alias="workflowId")
    params: CommandParams = Field(default_factory=CommandParams)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    source: Literal["llm", "regex"] = "regex"

    @property
    def recognized(self) -> bool:
        return self.workflow_id is not None


def regex_parse(command: str) -> ParsedCommand:
    """Deterministic keyword/regex interpretation of a command."""

    cmd = command.lower()
    workflow_id: str | None = None
    params = CommandParams()
    confidence = 0.0

    threshold_match = _THRESHOLD_RE.search(cmd)
    if threshold_match:
        threshold = int(threshold_match.group(1))
        workflow_id = (
            CRITICAL_ATTENDANCE.id if threshold < CRITICAL_THRESHOLD_CUTOFF else LOW_ATTENDANCE.id
        )
        params.threshold = threshold
        confidence = 0.8
    elif "attendance" in cmd and "65" in cmd:
        workflow_id = CRITICAL_ATTENDANCE.id
        params.threshold = CRITICAL_THRESHOLD_CUTOFF
        confidence = 0.8
    elif "attendance" in cmd:
        workflow_id = LOW_ATTENDANCE.id
        params.threshold = LOW_ATTENDANCE_DEFAULT
        confidence = 0.7

    # Later keyword groups take precedence.
    if any(word in cmd for word in ("assignment", "incomplete", "deadline")):
        workflow_id = ASSIGNMENT_TRACKING.id
        confidence = 0.8

    if "performance" in cmd or "review" in cmd:
        workflow_id = PERFORMANCE_REVIEW.id
        confidence = 0.8

    if any(word in cmd for word in ("schedule", "meeting", "google meet")):
        params.schedule_meeting = True
        date_match = _DATE_RE.search(cmd)
        params.target_date = date_match.group(1) if date_match else DEFAULT_TARGET_DATE

    return ParsedCommand(workflow_id=workflow_id, params=params, confidence=confidence, source="regex")


def build_prompt(command: str) -> str:
    return _PROMPT_TEMPLATE.format(
        workflows=json.dumps(describe_workflows_for_prompt(), indent=2),
        command=command.replace('"', "'"),
        default_date=DEFAULT_TARGET_DATE.lower(),
    )


def parse_llm_reply(text: str) -> ParsedCommand:
    """Extract and validate the first JSON object in an LLM reply.

    Raises:
        ValueError: If no JSON object is present, it is malformed, or it names
            a workflow that does not exist.
    """
    match = _JSON_OBJECT_RE.search(text)
    if match is None:
        raise ValueError("Could not find a JSON object in the LLM response")
    try:
        raw = json.loads(match.group(0))
        parsed = ParsedCommand.model_validate({**raw, "source": "llm"})
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        raise ValueError(f"Invalid LLM response: {e}") from e

    if parsed.workflow_id is not None and get_workflow(parsed.workflow_id) is None:
        raise ValueError(f"LLM returned an unknown workflow: {parsed.workflow_id}")
    return parsed


class CommandInterpreter:
    """LLM-first command interpreter with regex fallback."""

    def __init__(self, llm: LLMProvider | None = None) -> None:
        self._llm = llm

    @property
    def uses_llm(self) -> bool:
        return self._llm is not None

    def interpret(self, command: str) -> ParsedCommand:
        if self._llm is None:
            return regex_parse(command)

        try:
            reply = self._llm.generate(build_prompt(command))
            parsed = parse_llm_reply(reply)
        except Exception as e:
            logger.warning(
                "LLM command parsing failed; falling back to regex",
                extra={"error": str(e)},
            )
            return regex_parse(command)

        logger.info(
            "Command interpreted",
            extra={"workflow_id": parsed.workflow_id, "confidence": parsed.confidence},
        )
        return parsed
