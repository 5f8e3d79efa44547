"""Outbound communications: log-only and HTTP mail API senders."""

from app.infrastructure.external.communications.factory import create_communication_sender
from app.infrastructure.external.communications.http_sender import HttpCommunicationSender
from app.infrastructure.external.communications.log_only_sender import (
    LogOnlyCommunicationSender,
)

__all__ = [
    "HttpCommunicationSender",
    "LogOnlyCommunicationSender",
    "create_communication_sender",
]
