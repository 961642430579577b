"""Integration shortcuts."""

from .echo_client import EchoPublisher
from .sns_client import SNSPublisher, build_sns_publisher
from .twilio_client import TwilioClientError, TwilioPublisher, build_twilio_publisher

__all__ = [
    "EchoPublisher",
    "SNSPublisher",
    "TwilioClientError",
    "TwilioPublisher",
    "build_sns_publisher",
    "build_twilio_publisher",
]
