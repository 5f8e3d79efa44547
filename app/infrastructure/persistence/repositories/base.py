"""Base repository: generic ORM access with mapping to domain entities."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import Base


ModelType = TypeVar("ModelType", bound=Base)
EntityType = TypeVar("EntityType")


class BaseRepository(Generic[ModelType, EntityType]):
    """Base repository with get_by_id plus protected add/apply/remove helpers.

    Subclasses implement _to_entity to map ORM rows to domain entities so
    no ORM object leaves the persistence layer. Repositories flush but never
    commit; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    def _to_entity(self, obj: ModelType) -> EntityType:
        raise NotImplementedError

    async def _get_model(self, entity_id: str, *, for_update: bool = False) -> ModelType | None:
        """Return the ORM row by primary key (fresh from the database), or None."""
        model: Any = self.model
        stmt = (
            select(self.model)
            .where(model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, entity_id: str) -> EntityType | None:
        """Return a single entity by primary key, or None."""
        obj = await self._get_model(entity_id)
        return self._to_entity(obj) if obj is not None else None

    async def _add(self, obj: ModelType) -> ModelType:
        """Persist a new row and load server defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def _apply(self, obj: ModelType, changes: dict[str, Any]) -> ModelType:
        """Set attributes on a loaded row, flush and reload it."""
        for key, value in changes.items():
            setattr(obj, key, value)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def _remove(self, obj: ModelType) -> None:
        await self.db.delete(obj)
        await self.db.flush()
