"""US phone number formatting helpers."""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

_NON_DIGIT_RE = re.compile(r"\D")


def _digits(raw: str) -> str:
    return _NON_DIGIT_RE.sub("", raw)


def format_phone_to_e164(raw: str | None) -> str:
    """Return ``raw`` as an E.164 string, or unchanged when it cannot be mapped.

    Ten digits gain a ``+1`` prefix and eleven digits starting with ``1`` gain
    a ``+``. Anything else is passed through untouched with a warning so the
    downstream provider rejects it with its own error.
    """

    if not raw:
        return ""
    digits = _digits(str(raw))
    if len(digits) == 10:
        return "+1" + digits
    if len(digits) == 11 and digits.startswith("1"):
        return "+" + digits
    logger.warning(
        "Invalid phone number format: %r (extracted digits: %r)", raw, digits
    )
    return raw


def format_phone_for_display(raw: str | None) -> str:
    """Render a ten-digit number as ``(XXX) XXX-XXXX``."""

    if not raw:
        return ""
    digits = _digits(raw)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) != 10:
        return raw
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"


def is_valid_us_phone(raw: str | None) -> bool:
    if not raw:
        return False
    digits = _digits(raw)
    return len(digits) == 10 or (len(digits) == 11 and digits.startswith("1"))
