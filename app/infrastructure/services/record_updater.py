"""Record updater for the update_member_field action."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.enums import MemberStatus, MemberTier
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.infrastructure.persistence.repositories.member_repo import MemberRepository
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

# Writable member fields and, where restricted, their allowed values.
MEMBER_WRITABLE_FIELDS: dict[str, list[str] | None] = {
    "first_name": None,
    "last_name": None,
    "email": None,
    "tier": MemberTier.values(),
    "status": MemberStatus.values(),
}


class SqlRecordUpdater:
    """IRecordUpdater implementation over the SQL member table."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._members = MemberRepository(db)

    async def update(self, entity_type: str, entity_id: str, patch: dict[str, Any]) -> None:
        """Apply patch to one record.

        Raises:
            ValidationException: Unsupported entity type, field or value.
            ResourceNotFoundException: No record with entity_id.
        """
        if entity_type != "member":
            raise ValidationException(
                f"Unsupported entity type '{entity_type}'", field="entity_type"
            )
        for field, value in patch.items():
            if field not in MEMBER_WRITABLE_FIELDS:
                raise ValidationException(f"Member field '{field}' is not writable", field=field)
            allowed = MEMBER_WRITABLE_FIELDS[field]
            if allowed is not None and value not in allowed:
                raise ValidationException(
                    f"Invalid value {value!r} for member.{field}; expected one of {allowed}",
                    field=field,
                )
        # Savepoint: a failed write rolls back only itself.
        async with self.db.begin_nested():
            member = await self._members.update_fields(entity_id, patch)
        if member is None:
            raise ResourceNotFoundException("member", entity_id)
        logger.info("Updated member %s fields %s", entity_id, sorted(patch))
