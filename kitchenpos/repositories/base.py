from __future__ import annotations

from typing import Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from kitchenpos.database import Base

EntityT = TypeVar("EntityT", bound=Base)


class CrudRepository(Generic[EntityT]):
    """
    Session-bound repository for one entity type.

    save() only flushes; committing is left to the service so that one
    operation maps to one transaction.
    """

    entity: Type[EntityT]

    def __init__(self, session: AsyncSession):
        self.session = session

    @property
    def _pk(self):
        return self.entity.__mapper__.primary_key[0]

    async def save(self, instance: EntityT) -> EntityT:
        self.session.add(instance)
        await self.session.flush()
        return instance

    async def find_by_id(self, entity_id: int) -> Optional[EntityT]:
        return await self.session.get(self.entity, entity_id)

    async def find_all(self) -> List[EntityT]:
        result = await self.session.execute(select(self.entity).order_by(self._pk))
        return list(result.scalars().all())

    async def find_all_by_id_in(self, ids: Iterable[int]) -> List[EntityT]:
        ids = list(ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(self.entity).where(self._pk.in_(ids)).order_by(self._pk)
        )
        return list(result.scalars().all())

    async def count_by_id_in(self, ids: Iterable[int]) -> int:
        ids = set(ids)
        if not ids:
            return 0
        result = await self.session.execute(
            select(func.count()).select_from(self.entity).where(self._pk.in_(ids))
        )
        return result.scalar() or 0

    async def exists_by_id(self, entity_id: int) -> bool:
        return await self.count_by_id_in([entity_id]) > 0
