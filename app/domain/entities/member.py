"""Member domain entity (the fields automations read and write)."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from app.shared.utils.datetime import isoformat_utc


@dataclass
class MemberEntity:
    """Domain entity for a member record."""

    id: str
    email: str | None
    first_name: str
    last_name: str
    tier: str
    status: str
    created_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_context(self) -> dict[str, Any]:
        """Return the trigger context dispatched for member events."""
        return {
            "member_id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "name": self.full_name,
            "tier": self.tier,
            "status": self.status,
            "created_at": isoformat_utc(self.created_at),
        }
