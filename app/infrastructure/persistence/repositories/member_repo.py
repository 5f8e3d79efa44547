"""Member repository."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.member import MemberEntity
from app.domain.enums import MemberStatus, MemberTier
from app.infrastructure.persistence.models.member import Member
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc


class MemberRepository(BaseRepository[Member, MemberEntity]):
    """Member repository. Implements IMemberRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Member)

    def _to_entity(self, obj: Member) -> MemberEntity:
        return MemberEntity(
            id=obj.id,
            email=obj.email,
            first_name=obj.first_name,
            last_name=obj.last_name,
            tier=obj.tier,
            status=obj.status,
            created_at=ensure_utc(obj.created_at),
        )

    async def create(
        self,
        first_name: str,
        last_name: str,
        *,
        email: str | None = None,
        tier: str = MemberTier.BRONZE.value,
        status: str = MemberStatus.ACTIVE.value,
    ) -> MemberEntity:
        obj = Member(
            first_name=first_name,
            last_name=last_name,
            email=email,
            tier=tier,
            status=status,
        )
        return self._to_entity(await self._add(obj))

    async def update_fields(self, member_id: str, patch: dict[str, Any]) -> MemberEntity | None:
        obj = await self._get_model(member_id)
        if obj is None:
            return None
        return self._to_entity(await self._apply(obj, patch))
