"""Outbound SMS dispatch."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

from petclaim.core.config import get_settings
from petclaim.integrations import (
    EchoPublisher,
    build_sns_publisher,
    build_twilio_publisher,
)
from petclaim.security.redact import mask_phone
from petclaim.services.phone_utils import format_phone_to_e164

logger = logging.getLogger(__name__)

MISSING_FIELDS_ERROR = "Missing phoneNumber or message"


class SMSPublisher(Protocol):
    provider: str

    def publish(self, phone_number: str, message: str) -> str | None: ...


@dataclass(slots=True)
class SMSResult:
    """Outcome of a single best-effort send."""

    success: bool
    message_id: str | None
    phone_number: str
    timestamp: str
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": self.success,
            "messageId": self.message_id,
            "phoneNumber": self.phone_number,
            "timestamp": self.timestamp,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


def get_sms_publisher() -> SMSPublisher:
    """Return the publisher selected by ``SMS_PROVIDER``."""

    settings = get_settings()
    if settings.dev_sms_echo and not settings.is_production:
        return EchoPublisher()
    provider = settings.sms_provider.strip().lower()
    if provider == "echo":
        return EchoPublisher()
    if provider == "twilio":
        return build_twilio_publisher()
    if provider == "sns":
        return build_sns_publisher()
    raise ValueError(f"Unsupported SMS provider: {settings.sms_provider}")


async def send_sms(
    phone_number: str | None,
    message: str | None,
    *,
    publisher: SMSPublisher | None = None,
) -> SMSResult:
    """Send ``message`` to ``phone_number``; never raises.

    Provider failures come back as ``success=False`` with the provider's
    error text. There is no retry; the caller decides what to do next.
    """

    timestamp = datetime.now(UTC).isoformat()
    to = format_phone_to_e164(phone_number)

    logger.info("[SMS] Preparing to send to %s", mask_phone(to))

    if not to or not message:
        logger.error("[SMS] Error: %s", MISSING_FIELDS_ERROR)
        return SMSResult(
            success=False,
            message_id=None,
            phone_number=to or (phone_number or ""),
            timestamp=timestamp,
            error=MISSING_FIELDS_ERROR,
        )

    try:
        if publisher is None:
            publisher = get_sms_publisher()
        message_id = await asyncio.to_thread(publisher.publish, to, str(message))
    except Exception as exc:
        logger.error("[SMS] Failed to %s: %s", mask_phone(to), exc)
        return SMSResult(
            success=False,
            message_id=None,
            phone_number=to,
            timestamp=timestamp,
            error=str(exc) or exc.__class__.__name__,
        )

    logger.info("[SMS] Sent to %s (message id %s)", mask_phone(to), message_id)
    return SMSResult(
        success=True,
        message_id=message_id,
        phone_number=to,
        timestamp=timestamp,
    )
