"""Local echo publisher used outside production."""

from __future__ import annotations

import logging
import uuid

logger = logging.getLogger(__name__)


class EchoPublisher:
    """Log outbound SMS instead of delivering it."""

    provider = "echo"

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def publish(self, phone_number: str, message: str) -> str | None:
        self.sent.append((phone_number, message))
        logger.info("SMS echo to %s: %s", phone_number, message)
        return f"echo-{uuid.uuid4().hex}"
