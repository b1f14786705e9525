from typing import Any, Iterable, List, Optional, Type, TypeVar, Generic
from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

ModelT = TypeVar("ModelT")


class BaseRepository(Generic[ModelT]):
    """
    Keyed access to one mapped model. Sessions are always passed in; the
    caller owns the transaction.
    """

    def __init__(self, model: Type[ModelT], key: str = "id"):
        self.model = model
        self.key_name = key
        self.key = getattr(model, key)

    def _by_key(self, value: Any) -> Select:
        return select(self.model).where(self.key == value)

    async def add(self, entity: ModelT, session: AsyncSession) -> ModelT:
        session.add(entity)
        try:
            await session.flush([entity])
        except IntegrityError:
            await session.rollback()
            raise
        return entity

    async def get_by_key(
        self,
        value: Any,
        session: AsyncSession,
        *,
        for_update: bool = False,
    ) -> Optional[ModelT]:
        stmt = self._by_key(value)
        if for_update:
            stmt = stmt.with_for_update()
        res = await session.execute(stmt)
        return res.scalars().first()

    async def assign(
        self,
        entity: ModelT,
        data: dict[str, Any],
        session: AsyncSession,
        *,
        fields: Iterable[str],
    ) -> List[str]:
        """Set the listed attributes present in ``data``; returns the names written."""
        allowed = set(fields)
        written = [k for k in data if k in allowed and k != self.key_name]
        for k in written:
            setattr(entity, k, data[k])
        await session.flush([entity])
        return written

    async def delete_by_key(self, value: Any, session: AsyncSession) -> bool:
        obj = await self.get_by_key(value, session)
        if obj is None:
            return False
        await session.delete(obj)
        await session.flush()
        return True
