from __future__ import annotations

import logging
from functools import lru_cache

from invoicer.core import config
from invoicer.core.errors import GatewayFailure
from invoicer.sms.base import SmsProvider, SmsSendResult, mask_phone
from invoicer.sms.mock_provider import MockSmsProvider
from invoicer.sms.twilio_provider import TwilioSmsProvider

logger = logging.getLogger(__name__)


class SmsService:
    def __init__(self, provider: SmsProvider) -> None:
        self.provider = provider

    def send_text(self, *, to_phone: str, text: str) -> SmsSendResult:
        """Deliver ``text`` or raise GatewayFailure. Never retries."""
        if not to_phone:
            logger.warning("SMS not sent: user has no phone number")
            raise GatewayFailure("No phone number on file for 2FA")

        result = self.provider.send_text(to_phone=to_phone, text=text)
        if not result.ok:
            logger.warning(
                "SMS gateway failure provider=%s to=%s error=%s",
                self.provider.name,
                mask_phone(to_phone),
                result.error,
            )
            raise GatewayFailure()
        return result


def build_provider() -> SmsProvider:
    if config.SMS_PROVIDER == "twilio":
        return TwilioSmsProvider(
            account_sid=config.TWILIO_ACCOUNT_SID,
            auth_token=config.TWILIO_AUTH_TOKEN,
            from_phone=config.TWILIO_PHONE_NUMBER,
            base_url=config.TWILIO_API_BASE_URL,
            timeout=config.SMS_TIMEOUT_SECONDS,
        )
    if config.SMS_PROVIDER != "mock":
        logger.warning("Unknown SMS_PROVIDER=%s, using mock", config.SMS_PROVIDER)
    return MockSmsProvider()


@lru_cache(maxsize=1)
def get_sms_service() -> SmsService:
    return SmsService(build_provider())
