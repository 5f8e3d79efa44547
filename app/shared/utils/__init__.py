"""Shared utilities: datetime, generators."""

from app.shared.utils.datetime import ensure_utc, isoformat_utc, utc_now
from app.shared.utils.generators import generate_cuid, generate_prefixed_id

__all__ = [
    "generate_cuid",
    "generate_prefixed_id",
    "utc_now",
    "ensure_utc",
    "isoformat_utc",
]
