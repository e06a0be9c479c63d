"""WhatsApp messaging via Twilio.

Sending never raises: transport and API failures come back as
`MessageResult(success=False, error=...)` so one bad number cannot abort a
batch of notifications.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Protocol

import requests

from university_agent.core.config import MessagingConfig
from university_agent.integrations.models import MessageResult

logger = logging.getLogger(__name__)

WHATSAPP_PREFIX = "whatsapp:"


class Messenger(Protocol):
    def send_whatsapp(self, to: str, body: str) -> MessageResult: ...


def _whatsapp_address(phone: str) -> str:
    phone = phone.strip()
    return phone if phone.startswith(WHATSAPP_PREFIX) else f"{WHATSAPP_PREFIX}{phone}"


class TwilioMessenger:
    """Send WhatsApp messages through Twilio's Messages REST resource."""

    def __init__(
        self,
        *,
        account_sid: str,
        auth_token: str,
        from_number: str,
        status_callback_url: str | None = None,
        base_url: str = "https://api.twilio.com/2010-04-01",
        session: requests.Session | None = None,
    ) -> None:
        if not account_sid or not auth_token:
            raise ValueError("Twilio account SID and auth token are required")
        if not from_number:
            raise ValueError("Twilio WhatsApp sender is required")

        self._account_sid = account_sid
        self._from = _whatsapp_address(from_number)
        self._status_callback_url = status_callback_url
        self._messages_url = f"{base_url.rstrip('/')}/Accounts/{account_sid}/Messages.json"
        self._session = session or requests.Session()
        self._session.auth = (account_sid, auth_token)
        self._session.headers.update({"User-Agent": "university-agent"})

    def send_whatsapp(self, to: str, body: str) -> MessageResult:
        form = {"To": _whatsapp_address(to), "From": self._from, "Body": body}
        if self._status_callback_url:
            form["StatusCallback"] = self._status_callback_url

        try:
            resp = self._session.post(self._messages_url, data=form, timeout=30)
            resp.raise_for_status()
            sid = str(resp.json().get("sid") or "")
        except (requests.RequestException, ValueError) as e:
            logger.error("WhatsApp send failed", extra={"to": to, "error": str(e)})
            return MessageResult(success=False, error=str(e))

        logger.info("WhatsApp sent", extra={"to": to, "sid": sid})
        return MessageResult(success=True, sid=sid or None)

    def close(self) -> None:
        self._session.close()


@dataclass(frozen=True, slots=True)
class SentMessage:
    to: str
    body: str
    sid: str


class MockMessenger:
    """Records messages instead of sending them (used when Twilio is not configured)."""

    def __init__(self) -> None:
        self.outbox: list[SentMessage] = []

    def send_whatsapp(self, to: str, body: str) -> MessageResult:
        sid = f"mock-{uuid.uuid4().hex[:12]}"
        self.outbox.append(SentMessage(to=to, body=body, sid=sid))
        logger.info("Mock WhatsApp recorded", extra={"to": to, "sid": sid})
        return MessageResult(success=True, sid=sid)


def create_messenger(config: MessagingConfig) -> Messenger:
    if not config.enabled:
        logger.warning("Twilio not configured; WhatsApp messages will be recorded, not sent")
        return MockMessenger()
    return TwilioMessenger(
        account_sid=config.account_sid or "",
        auth_token=config.auth_token or "",
        from_number=config.whatsapp_from or "",
        status_callback_url=config.status_callback_url,
        base_url=config.base_url,
    )
