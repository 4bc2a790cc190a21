from __future__ import annotations

import logging
import uuid

from invoicer.sms.base import SmsProvider, SmsSendResult, mask_phone

logger = logging.getLogger(__name__)


class MockSmsProvider(SmsProvider):
    """Accepts every message and only logs it. Used in dev and tests."""

    name = "mock"

    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []

    def send_text(self, *, to_phone: str, text: str) -> SmsSendResult:
        message_id = f"mock-{uuid.uuid4().hex[:10]}"
        self.sent.append({"to": to_phone, "text": text, "id": message_id})
        logger.info("SMS (mock) queued to=%s id=%s", mask_phone(to_phone), message_id)
        return SmsSendResult(status="sent", provider_message_id=message_id)
