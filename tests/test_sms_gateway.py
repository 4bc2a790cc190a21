from urllib.parse import parse_qs

import httpx
import pytest

from invoicer.core import config
from invoicer.core.errors import GatewayFailure
from invoicer.sms.base import SmsSendResult, mask_phone
from invoicer.sms.mock_provider import MockSmsProvider
from invoicer.sms.service import SmsService, build_provider
from invoicer.sms.twilio_provider import TwilioSmsProvider


def _twilio(handler) -> TwilioSmsProvider:
    return TwilioSmsProvider(
        account_sid="AC123",
        auth_token="token",
        from_phone="+15550009999",
        base_url="https://twilio.test/2010-04-01",
        transport=httpx.MockTransport(handler),
    )


def test_twilio_posts_form_with_basic_auth():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers.get("authorization", "")
        captured["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={"sid": "SM42"})

    result = _twilio(handler).send_text(to_phone="+15550001111", text="Your 2FA code is: 123456")

    assert result.ok
    assert result.provider_message_id == "SM42"
    assert captured["url"] == "https://twilio.test/2010-04-01/Accounts/AC123/Messages.json"
    assert captured["auth"].startswith("Basic ")
    assert captured["form"]["To"] == ["+15550001111"]
    assert captured["form"]["From"] == ["+15550009999"]
    assert captured["form"]["Body"] == ["Your 2FA code is: 123456"]


def test_twilio_error_status_is_a_failed_result():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "Invalid 'To' number"})

    result = _twilio(handler).send_text(to_phone="+1", text="hi")

    assert not result.ok
    assert "Invalid 'To' number" in result.error


def test_twilio_network_error_is_a_failed_result():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = _twilio(handler).send_text(to_phone="+15550001111", text="hi")

    assert result.status == "failed"


def test_twilio_without_credentials_does_not_call_out():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    provider = TwilioSmsProvider(
        account_sid="",
        auth_token="",
        from_phone="",
        transport=httpx.MockTransport(handler),
    )

    assert provider.send_text(to_phone="+15550001111", text="hi").status == "failed"


def test_service_raises_gateway_failure_once_without_retry():
    calls = []

    class _Provider:
        name = "flaky"

        def send_text(self, *, to_phone, text):
            calls.append(to_phone)
            return SmsSendResult(status="failed", error="down")

    with pytest.raises(GatewayFailure):
        SmsService(_Provider()).send_text(to_phone="+15550001111", text="hi")

    assert len(calls) == 1


def test_service_requires_phone_number():
    provider = MockSmsProvider()

    with pytest.raises(GatewayFailure):
        SmsService(provider).send_text(to_phone="", text="hi")

    assert provider.sent == []


def test_build_provider_follows_config(monkeypatch):
    monkeypatch.setattr(config, "SMS_PROVIDER", "twilio")
    assert isinstance(build_provider(), TwilioSmsProvider)

    monkeypatch.setattr(config, "SMS_PROVIDER", "mock")
    assert isinstance(build_provider(), MockSmsProvider)


def test_mask_phone_keeps_last_digits():
    assert mask_phone("+15550001111") == "****1111"
    assert mask_phone(None) == "****"
