"""Communication sender factory: HTTP mail API or log-only, from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from app.application.interfaces.services import ICommunicationSender
from app.infrastructure.external.communications.http_sender import HttpCommunicationSender
from app.infrastructure.external.communications.log_only_sender import (
    LogOnlyCommunicationSender,
)
from app.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from app.core.config import Settings

logger = get_logger(__name__)


def create_communication_sender(
    settings: "Settings", *, http_client: httpx.AsyncClient | None = None
) -> ICommunicationSender:
    """Return HttpCommunicationSender when MAIL_API_URL is set, else LogOnlyCommunicationSender."""
    if not settings.mail_api_url:
        logger.info("MAIL_API_URL not set; communications are logged only")
        return LogOnlyCommunicationSender()
    return HttpCommunicationSender(
        settings.mail_api_url,
        api_key=settings.mail_api_key.get_secret_value() if settings.mail_api_key else None,
        from_address=settings.mail_from_address,
        http_client=http_client,
    )
