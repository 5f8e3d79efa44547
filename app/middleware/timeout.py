"""Request timeout middleware.

Cancels a request that runs longer than the configured timeout and answers 504.
Paths listed in exempt_paths (the cron batch endpoint) run unbounded; their
work is bounded per action instead.
Uses raw ASGI (no BaseHTTPMiddleware).
"""

import asyncio
import json
import logging
from collections.abc import Iterable
from typing import Callable

logger = logging.getLogger(__name__)


def _timeout_body(timeout_seconds: float) -> bytes:
    return json.dumps(
        {
            "error": "GATEWAY_TIMEOUT",
            "message": f"Request timed out after {timeout_seconds} seconds",
            "details": {"timeout_seconds": timeout_seconds},
        }
    ).encode()


def TimeoutMiddleware(
    app: Callable,
    timeout_seconds: float,
    exempt_paths: Iterable[str] = (),
) -> Callable:
    """Cancel request after timeout_seconds unless its path is exempt. Raw ASGI."""
    exempt = frozenset(p.rstrip("/") for p in exempt_paths)

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http" or scope.get("path", "").rstrip("/") in exempt:
            await app(scope, receive, send)
            return
        response_started = False

        async def send_wrapper(message: dict) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(app(scope, receive, send_wrapper), timeout=timeout_seconds)
        except TimeoutError:
            logger.warning(
                "Request timed out after %s seconds: %s %s",
                timeout_seconds,
                scope.get("method", ""),
                scope.get("path", ""),
            )
            if response_started:
                return
            await send(
                {
                    "type": "http.response.start",
                    "status": 504,
                    "headers": [(b"content-type", b"application/json")],
                }
            )
            await send(
                {"type": "http.response.body", "body": _timeout_body(timeout_seconds)}
            )

    return asgi_app
