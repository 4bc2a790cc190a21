from __future__ import annotations

import logging
from typing import Any

import httpx

from invoicer.sms.base import SmsProvider, SmsSendResult, mask_phone

logger = logging.getLogger(__name__)


class TwilioSmsProvider(SmsProvider):
    """Twilio Messages REST API. One attempt per call; retrying is up to the caller."""

    name = "twilio"

    def __init__(
        self,
        *,
        account_sid: str,
        auth_token: str,
        from_phone: str,
        base_url: str = "https://api.twilio.com/2010-04-01",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_phone = from_phone
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _messages_url(self) -> str:
        return f"{self.base_url}/Accounts/{self.account_sid}/Messages.json"

    def send_text(self, *, to_phone: str, text: str) -> SmsSendResult:
        if not self.account_sid or not self.auth_token or not self.from_phone:
            return SmsSendResult(status="failed", error="Twilio credentials are incomplete")

        form = {"To": to_phone, "From": self.from_phone, "Body": text}
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(
                    self._messages_url(),
                    data=form,
                    auth=(self.account_sid, self.auth_token),
                )
        except httpx.HTTPError as exc:
            logger.warning("SMS send failed to=%s error=%s", mask_phone(to_phone), exc)
            return SmsSendResult(status="failed", error=str(exc))

        data: dict[str, Any]
        try:
            data = response.json()
        except ValueError:
            data = {"raw": response.text}

        if 200 <= response.status_code < 300:
            message_id = data.get("sid")
            logger.info("SMS sent to=%s id=%s", mask_phone(to_phone), message_id)
            return SmsSendResult(status="sent", provider_message_id=message_id, response_payload=data)

        error = f"Twilio error {response.status_code}: {data.get('message') or response.text}"
        logger.warning("SMS send failed to=%s status=%s", mask_phone(to_phone), response.status_code)
        return SmsSendResult(status="failed", error=error, response_payload=data)
