"""Twilio publisher for programmable SMS."""

from __future__ import annotations

from typing import Any

from twilio.rest import Client


class TwilioClientError(RuntimeError):
    """Raised when the Twilio publisher is not usable."""


class TwilioPublisher:
    """Send SMS messages through the Twilio Messages API."""

    provider = "twilio"

    def __init__(
        self,
        *,
        account_sid: str | None,
        auth_token: str | None,
        from_number: str | None,
        client: Any | None = None,
    ) -> None:
        if not from_number:
            raise TwilioClientError("Twilio sender number is not configured")
        if client is None:
            if not (account_sid and auth_token):
                raise TwilioClientError(
                    "Twilio client not initialized - missing credentials"
                )
            client = Client(account_sid, auth_token)
        self._client = client
        self._from_number = from_number

    def publish(self, phone_number: str, message: str) -> str | None:
        response = self._client.messages.create(
            body=message, from_=self._from_number, to=phone_number
        )
        return getattr(response, "sid", None)


def build_twilio_publisher(**overrides: Any) -> TwilioPublisher:
    """Factory that honours application settings."""

    from petclaim.core.config import get_settings

    settings = get_settings()
    return TwilioPublisher(
        account_sid=overrides.get("account_sid") or settings.twilio_account_sid,
        auth_token=overrides.get("auth_token") or settings.twilio_auth_token,
        from_number=overrides.get("from_number") or settings.twilio_phone_number,
        client=overrides.get("client"),
    )
