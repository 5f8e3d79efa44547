"""Communication sender backed by an HTTP mail API."""

from typing import Any

import httpx

from app.infrastructure.exceptions import ExternalServiceException
from app.infrastructure.external._http import http_client_cm, json_body, response_reason
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

SERVICE_NAME = "mail_api"


class HttpCommunicationSender:
    """Posts templated messages to a transactional mail API.

    Request body: {"template", "to", "from", "data"}; bearer auth when an API key
    is set. Any non-2xx answer or transport error raises ExternalServiceException.
    """

    def __init__(
        self,
        api_url: str,
        *,
        api_key: str | None = None,
        from_address: str,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_url = api_url
        self._api_key = api_key
        self._from_address = from_address
        self._shared_http = http_client

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def send(self, template: str, recipient: str, data: dict[str, Any]) -> None:
        body = json_body(
            {"template": template, "to": recipient, "from": self._from_address, "data": data}
        )
        try:
            async with http_client_cm(self._shared_http) as client:
                response = await client.post(self._api_url, content=body, headers=self._headers())
        except httpx.HTTPError as e:
            raise ExternalServiceException(SERVICE_NAME, str(e) or type(e).__name__) from e
        if response.is_error:
            raise ExternalServiceException(
                SERVICE_NAME, response_reason(response), response.status_code
            )
        logger.info("Sent template %r to %s", template, recipient)
