from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass
class SmsSendResult:
    status: str  # sent | failed
    provider_message_id: str | None = None
    error: str | None = None
    response_payload: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.status == "sent"


class SmsProvider(Protocol):
    name: str

    def send_text(self, *, to_phone: str, text: str) -> SmsSendResult:
        ...


def mask_phone(phone: str | None) -> str:
    if not phone:
        return "****"
    text = str(phone)
    if len(text) <= 4:
        return "****"
    return f"****{text[-4:]}"
