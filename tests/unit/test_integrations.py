"""Unit tests for messaging, calendar and ledger adapters."""

from __future__ import annotations

import re
from unittest.mock import Mock

import requests

from university_agent.core.config import CalendarConfig, MessagingConfig
from university_agent.integrations.calendar import MockCalendar
from university_agent.integrations.ledger import MockLedger, ledger_student_hash
from university_agent.integrations.messaging import (
    MockMessenger,
    TwilioMessenger,
    create_messenger,
)


def _twilio(session: Mock, **kwargs: object) -> TwilioMessenger:
    return TwilioMessenger(
        account_sid="AC123",
        auth_token="secret",
        from_number="+14155238886",
        session=session,
        **kwargs,  # type: ignore[arg-type]
    )


def _session() -> Mock:
    session = Mock(spec=requests.Session)
    session.headers = {}
    return session


def test_twilio_posts_whatsapp_form() -> None:
    session = _session()
    session.post.return_value.json.return_value = {"sid": "SM1"}
    messenger = _twilio(session, status_callback_url="https://example.org/status")

    result = messenger.send_whatsapp("+15550000001", "hello")

    assert result.success is True
    assert result.sid == "SM1"
    assert session.auth == ("AC123", "secret")
    session.post.assert_called_once_with(
        "https://api.twilio.com/2010-04-01/Accounts/AC123/Messages.json",
        data={
            "To": "whatsapp:+15550000001",
            "From": "whatsapp:+14155238886",
            "Body": "hello",
            "StatusCallback": "https://example.org/status",
        },
        timeout=30,
    )


def test_twilio_transport_errors_become_results() -> None:
    session = _session()
    session.post.side_effect = requests.ConnectionError("network down")

    result = _twilio(session).send_whatsapp("whatsapp:+15550000001", "hello")

    assert result.success is False
    assert "network down" in (result.error or "")


def test_create_messenger_falls_back_to_mock() -> None:
    config = MessagingConfig(account_sid=None, auth_token=None, whatsapp_from=None)

    assert isinstance(create_messenger(config), MockMessenger)


def test_mock_messenger_records_outbox() -> None:
    messenger = MockMessenger()
    result = messenger.send_whatsapp("+1", "hi")

    assert result.success is True
    assert messenger.outbox[0].to == "+1"
    assert messenger.outbox[0].sid == result.sid


def test_mock_calendar_generates_meet_links() -> None:
    calendar = MockCalendar(CalendarConfig(meet_base_url="https://meet.example.org/"))

    first = calendar.schedule_meeting("Alice", "Friday 2pm")
    second = calendar.schedule_meeting("Bob")

    assert re.fullmatch(r"https://meet\.example\.org/[a-z]{3}-[a-z]{4}-[a-z]{3}", first.meeting_link or "")
    assert first.scheduled_time == "Friday 2pm"
    assert second.scheduled_time == "Tomorrow 10am"
    assert len(calendar.scheduled) == 2


def test_mock_ledger_records_hashed_entries() -> None:
    ledger = MockLedger()

    receipt = ledger.log_action(7, "NOTIFY_LOW_ATTENDANCE", "EXEC_1")

    assert receipt.success is True
    assert receipt.mock is True
    assert re.fullmatch(r"0x[0-9a-f]{64}", receipt.tx_hash or "")
    assert receipt.student_hash == ledger_student_hash("7")
    assert receipt.execution_id == "EXEC_1"
    assert receipt.gas_used == "21000"


def test_mock_ledger_batch_and_lookup() -> None:
    ledger = MockLedger()

    receipts = ledger.log_batch_actions([(1, "A", "EXEC_1"), (2, "B", None), (1, "C", "EXEC_2")])

    assert len(receipts) == 3
    assert receipts[1].execution_id.startswith("EXEC_")  # type: ignore[union-attr]
    assert [r.action for r in ledger.get_student_logs(1)] == ["A", "C"]
    assert ledger.get_student_logs(99) == []
