"""Service layer exports."""
from petclaim.services import (
    dose_token_service,
    medication_service,
    phone_utils,
    sms_service,
)

__all__ = [
    "dose_token_service",
    "medication_service",
    "phone_utils",
    "sms_service",
]
