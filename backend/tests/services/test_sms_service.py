"""Tests for outbound SMS dispatch."""

from __future__ import annotations

import os

import pytest

from petclaim.core.config import get_settings
from petclaim.integrations import (
    EchoPublisher,
    SNSPublisher,
    TwilioClientError,
    TwilioPublisher,
)
from petclaim.services import sms_service
from petclaim.services.sms_service import MISSING_FIELDS_ERROR

pytestmark = pytest.mark.asyncio


class RecordingPublisher:
    provider = "fake"

    def __init__(self, *, fail_with: Exception | None = None) -> None:
        self.calls: list[tuple[str, str]] = []
        self.fail_with = fail_with

    def publish(self, phone_number: str, message: str) -> str | None:
        self.calls.append((phone_number, message))
        if self.fail_with is not None:
            raise self.fail_with
        return "msg-123"


class FakeSNSClient:
    def __init__(self) -> None:
        self.published: list[dict[str, str]] = []

    def publish(self, **kwargs):
        self.published.append(kwargs)
        return {"MessageId": "sns-42"}


async def test_send_normalizes_number_and_reports_message_id() -> None:
    publisher = RecordingPublisher()
    result = await sms_service.send_sms("(312) 305-0403", "Hello", publisher=publisher)

    assert result.success is True
    assert result.message_id == "msg-123"
    assert result.phone_number == "+13123050403"
    assert result.error is None
    assert publisher.calls == [("+13123050403", "Hello")]
    assert result.to_dict()["messageId"] == "msg-123"
    assert "error" not in result.to_dict()


@pytest.mark.parametrize(
    ("phone", "message"),
    [("3123050403", ""), ("", "Hello"), (None, None)],
)
async def test_missing_fields_fail_without_calling_provider(phone, message) -> None:
    publisher = RecordingPublisher()
    result = await sms_service.send_sms(phone, message, publisher=publisher)

    assert result.success is False
    assert result.error == MISSING_FIELDS_ERROR
    assert result.message_id is None
    assert publisher.calls == []


async def test_provider_failure_is_returned_not_raised() -> None:
    publisher = RecordingPublisher(fail_with=RuntimeError("Invalid parameter: PhoneNumber"))
    result = await sms_service.send_sms("123", "Hello", publisher=publisher)

    assert result.success is False
    assert result.error == "Invalid parameter: PhoneNumber"
    # Unmappable numbers reach the provider unchanged.
    assert publisher.calls == [("123", "Hello")]
    payload = result.to_dict()
    assert payload["success"] is False
    assert payload["error"] == "Invalid parameter: PhoneNumber"
    assert payload["phoneNumber"] == "123"


async def test_sns_publisher_passes_phone_and_message() -> None:
    fake = FakeSNSClient()
    publisher = SNSPublisher(region="us-east-1", client=fake)
    result = await sms_service.send_sms("3123050403", "Dose time", publisher=publisher)

    assert result.success is True
    assert result.message_id == "sns-42"
    assert fake.published == [{"PhoneNumber": "+13123050403", "Message": "Dose time"}]


async def test_publisher_selection(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", os.environ.get("DATABASE_URL", "sqlite+aiosqlite://"))
    monkeypatch.setenv("APP_ENV", "local")
    monkeypatch.setenv("DEV_SMS_ECHO", "false")

    monkeypatch.setenv("SMS_PROVIDER", "echo")
    get_settings.cache_clear()
    assert isinstance(sms_service.get_sms_publisher(), EchoPublisher)

    monkeypatch.setenv("SMS_PROVIDER", "twilio")
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", "secret")
    monkeypatch.setenv("TWILIO_PHONE_NUMBER", "+15555550100")
    get_settings.cache_clear()
    assert isinstance(sms_service.get_sms_publisher(), TwilioPublisher)

    monkeypatch.setenv("SMS_PROVIDER", "carrier-pigeon")
    get_settings.cache_clear()
    with pytest.raises(ValueError):
        sms_service.get_sms_publisher()

    get_settings.cache_clear()


async def test_twilio_publisher_requires_sender_and_credentials() -> None:
    with pytest.raises(TwilioClientError, match="sender number"):
        TwilioPublisher(account_sid="AC123", auth_token="secret", from_number=None)
    with pytest.raises(TwilioClientError, match="missing credentials"):
        TwilioPublisher(account_sid=None, auth_token=None, from_number="+15555550100")


async def test_twilio_publisher_returns_message_sid() -> None:
    class FakeMessages:
        def __init__(self) -> None:
            self.created: list[dict[str, str]] = []

        def create(self, **kwargs):
            self.created.append(kwargs)
            return type("Message", (), {"sid": "SM123"})()

    class FakeTwilio:
        messages = FakeMessages()

    client = FakeTwilio()
    publisher = TwilioPublisher(
        account_sid=None, auth_token=None, from_number="+15555550100", client=client
    )
    result = await sms_service.send_sms("312-305-0403", "Hi", publisher=publisher)

    assert result.message_id == "SM123"
    assert client.messages.created == [
        {"body": "Hi", "from_": "+15555550100", "to": "+13123050403"}
    ]
