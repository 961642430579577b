"""Amazon SNS publisher for direct-to-phone SMS."""

from __future__ import annotations

from typing import Any

import boto3


class SNSPublisher:
    """Publish SMS messages through the SNS ``Publish`` operation."""

    provider = "sns"

    def __init__(
        self,
        *,
        region: str,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        client: Any | None = None,
    ) -> None:
        if client is None:
            credentials: dict[str, str] = {}
            # Fall back to the default boto3 credential chain when unset.
            if access_key_id and secret_access_key:
                credentials = {
                    "aws_access_key_id": access_key_id,
                    "aws_secret_access_key": secret_access_key,
                }
            client = boto3.client("sns", region_name=region, **credentials)
        self._client = client

    def publish(self, phone_number: str, message: str) -> str | None:
        response = self._client.publish(PhoneNumber=phone_number, Message=message)
        return response.get("MessageId")


def build_sns_publisher(**overrides: Any) -> SNSPublisher:
    """Factory that honours application settings."""

    from petclaim.core.config import get_settings

    settings = get_settings()
    return SNSPublisher(
        region=overrides.get("region") or settings.aws_region,
        access_key_id=overrides.get("access_key_id") or settings.aws_access_key_id,
        secret_access_key=overrides.get("secret_access_key")
        or settings.aws_secret_access_key,
        client=overrides.get("client"),
    )
