"""Communication sender that logs instead of sending."""

import logging
from typing import Any

from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class LogOnlyCommunicationSender:
    """ICommunicationSender implementation that logs instead of sending email.

    Use when no mail API is configured. Production swaps in HttpCommunicationSender.
    """

    async def send(self, template: str, recipient: str, data: dict[str, Any]) -> None:
        """Log the communication; nothing is delivered."""
        logger.info("Communication: would send template %r to %s", template, recipient)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Communication data keys for %r: %s", template, sorted(data))
