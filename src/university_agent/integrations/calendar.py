"""Meeting scheduling.

Only a link-generating calendar is provided: meetings are not written to a
real calendar, but each call returns a unique Meet-style join link.
"""

from __future__ import annotations

import logging
import secrets
import string
from typing import Protocol

from university_agent.core.config import CalendarConfig
from university_agent.integrations.models import MeetingResult

logger = logging.getLogger(__name__)


class CalendarProvider(Protocol):
    def schedule_meeting(self, student_name: str, when: str | None = None) -> MeetingResult: ...


def _meeting_code() -> str:
    # Meet codes look like "abc-defg-hij".
    parts = (3, 4, 3)
    return "-".join(
        "".join(secrets.choice(string.ascii_lowercase) for _ in range(n)) for n in parts
    )


class MockCalendar:
    def __init__(self, config: CalendarConfig | None = None) -> None:
        self._config = config or CalendarConfig()
        self.scheduled: list[MeetingResult] = []

    def schedule_meeting(self, student_name: str, when: str | None = None) -> MeetingResult:
        slot = (when or "").strip() or self._config.default_slot
        link = f"{self._config.meet_base_url.rstrip('/')}/{_meeting_code()}"
        result = MeetingResult(success=True, meeting_link=link, scheduled_time=slot)
        self.scheduled.append(result)
        logger.info("Meeting scheduled", extra={"attendee": student_name, "slot": slot})
        return result
