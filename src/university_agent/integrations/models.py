"""Records exchanged with external collaborators."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


def _utc_iso_now() -> str:
    return datetime.now(tz=UTC).isoformat()


class Student(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | str
    name: str
    phone: str | None = None
    attendance: float
    warnings: int = 0


class Assignment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | str | None = None
    student_id: int | str
    title: str
    completed: int = 0
    total: int = 1
    due_date: str | None = None

    @property
    def is_incomplete(self) -> bool:
        return self.completed < self.total

    @property
    def completion_rate(self) -> float:
        if self.total <= 0:
            return 1.0
        return self.completed / self.total


class LogEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | str | None = None
    student_hash: str
    action: str
    timestamp: str = Field(default_factory=_utc_iso_now)


class MessageResult(BaseModel):
    success: bool
    sid: str | None = None
    error: str | None = None


class MeetingResult(BaseModel):
    success: bool
    meeting_link: str | None = None
    scheduled_time: str | None = None


class LedgerReceipt(BaseModel):
    success: bool
    tx_hash: str | None = None
    block_number: int | None = None
    gas_used: str | None = None
    student_hash: str | None = None
    execution_id: str | None = None
    timestamp: str = Field(default_factory=_utc_iso_now)
    action: str | None = None
    mock: bool = True
    error: str | None = None
