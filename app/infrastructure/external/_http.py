"""Shared helpers for outbound JSON calls over httpx."""

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

DEFAULT_TIMEOUT_SECONDS = 30.0


@asynccontextmanager
async def http_client_cm(
    shared: httpx.AsyncClient | None, timeout: float = DEFAULT_TIMEOUT_SECONDS
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the shared HTTP client or a short-lived one (connection reuse when shared)."""
    if shared is not None:
        yield shared
        return
    async with httpx.AsyncClient(timeout=timeout) as client:
        yield client


def json_body(payload: Any) -> bytes:
    """Encode payload as JSON; datetimes and other non-JSON values become strings."""
    return json.dumps(payload, default=str).encode()


def response_reason(response: httpx.Response, limit: int = 200) -> str:
    """Short human-readable reason for a failed response."""
    text = (response.text or "").strip()
    return f"HTTP {response.status_code}: {text[:limit]}" if text else f"HTTP {response.status_code}"
