"""Infrastructure exceptions for outbound calls to external services.

They extend GuildhallException so the action executor reports them like any
other action failure and presentation can map them consistently.
"""

from app.domain.exceptions import GuildhallException


class ExternalServiceException(GuildhallException):
    """An external service (mail API, workflow runner) rejected or failed a call."""

    def __init__(self, service: str, reason: str, status_code: int | None = None) -> None:
        details: dict[str, object] = {"service": service, "reason": reason}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            f"{service} request failed: {reason}",
            "EXTERNAL_SERVICE_ERROR",
            details,
        )
        self.service = service
        self.status_code = status_code


class ExternalServiceNotConfiguredException(ExternalServiceException):
    """A call needs an external service whose base URL or key is not set."""

    def __init__(self, service: str, setting: str) -> None:
        super().__init__(service, f"{setting} is not configured")
        self.setting = setting
