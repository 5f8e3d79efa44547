"""Request context management using contextvars.

Async-safe storage for the id that correlates log lines of one HTTP request
or one background job (delayed continuation, onboarding step, cron script).

Usage:
    token = set_request_id("abc123")
    get_request_id()  # "abc123"
    reset_request_id(token)
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(request_id: str | None) -> Token[str | None]:
    """Bind request_id to the current task. Returns a token for reset_request_id."""
    return _request_id.set(request_id)


def reset_request_id(token: Token[str | None]) -> None:
    _request_id.reset(token)


def get_request_id() -> str | None:
    """Return the id bound to the current task, or None outside a request/job."""
    return _request_id.get()


@contextmanager
def request_id_scope(request_id: str) -> Iterator[str]:
    """Bind request_id for the duration of the block (background jobs)."""
    token = set_request_id(request_id)
    try:
        yield request_id
    finally:
        reset_request_id(token)
