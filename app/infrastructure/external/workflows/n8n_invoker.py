"""n8n client for the call_external_workflow action and workflow status lookup.

Workflows are started through their webhook (POST {base}/webhook/{ref}); status
is read from the public API (GET {base}/api/v1/executions/{id}), which needs an
API key. When the webhook answers with an execution id it becomes the status
token; otherwise the token is local ("{ref}:{cuid}") and its status is unknown.
"""

from typing import Any
from urllib.parse import quote

import httpx

from app.infrastructure.exceptions import (
    ExternalServiceException,
    ExternalServiceNotConfiguredException,
)
from app.infrastructure.external._http import http_client_cm, json_body, response_reason
from app.shared.telemetry.logging import get_logger
from app.shared.utils.generators import generate_prefixed_id

logger = get_logger(__name__)

SERVICE_NAME = "n8n"
UNKNOWN_STATUS = "unknown"
LOCAL_TOKEN_SEP = ":"


def _execution_id(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, list) and data:
        data = data[0]
    if not isinstance(data, dict):
        return None
    value = data.get("executionId") or data.get("execution_id")
    return str(value) if value else None


def _status_from_execution(data: dict[str, Any]) -> str:
    status = data.get("status")
    if status:
        return str(status)
    if data.get("finished") is True:
        return "success"
    if data.get("finished") is False:
        return "running"
    return UNKNOWN_STATUS


class N8nWorkflowInvoker:
    """IExternalWorkflowInvoker implementation for n8n."""

    def __init__(
        self,
        base_url: str | None,
        *,
        api_key: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        self._api_key = api_key
        self._shared_http = http_client

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def invoke(self, workflow_ref: str, payload: dict[str, Any]) -> str:
        """Start the workflow; return its execution id or a local token."""
        if not self._base_url:
            raise ExternalServiceNotConfiguredException(SERVICE_NAME, "N8N_BASE_URL")
        url = f"{self._base_url}/webhook/{quote(workflow_ref, safe='/-_')}"
        try:
            async with http_client_cm(self._shared_http) as client:
                response = await client.post(url, content=json_body(payload), headers=self._headers())
        except httpx.HTTPError as e:
            raise ExternalServiceException(SERVICE_NAME, str(e) or type(e).__name__) from e
        if response.is_error:
            raise ExternalServiceException(
                SERVICE_NAME, response_reason(response), response.status_code
            )
        token = _execution_id(response) or generate_prefixed_id(workflow_ref, LOCAL_TOKEN_SEP)
        logger.info("Started n8n workflow %s (token=%s)", workflow_ref, token)
        return token

    async def query_status(self, status_token: str) -> str:
        """Return the execution status, or "unknown" when it cannot be looked up."""
        if not self._base_url or not self._api_key or LOCAL_TOKEN_SEP in status_token:
            return UNKNOWN_STATUS
        url = f"{self._base_url}/api/v1/executions/{quote(status_token, safe='')}"
        try:
            async with http_client_cm(self._shared_http) as client:
                response = await client.get(url, headers={"X-N8N-API-KEY": self._api_key})
        except httpx.HTTPError as e:
            raise ExternalServiceException(SERVICE_NAME, str(e) or type(e).__name__) from e
        if response.status_code == 404:
            return UNKNOWN_STATUS
        if response.is_error:
            raise ExternalServiceException(
                SERVICE_NAME, response_reason(response), response.status_code
            )
        try:
            data = response.json()
        except ValueError:
            return UNKNOWN_STATUS
        return _status_from_execution(data) if isinstance(data, dict) else UNKNOWN_STATUS
