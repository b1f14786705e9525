from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.v1_0.models import Supplier
from .base_repository import BaseRepository

# columnas del documento (todas menos la clave)
DOCUMENT_FIELDS = frozenset(c.name for c in Supplier.__table__.columns if not c.primary_key)


class SupplierRepository(BaseRepository[Supplier]):
    """
    Document store for supplier records keyed by identity id.

    Each call runs in its own session and transaction; callers never share
    a session with the identity or blob providers.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(Supplier)
        self.session_factory = session_factory

    @staticmethod
    def to_document(entity: Supplier) -> Dict[str, Any]:
        return {name: getattr(entity, name) for name in DOCUMENT_FIELDS}

    async def get(self, uid: str) -> Optional[Dict[str, Any]]:
        async with self.session_factory() as session:
            entity = await self.get_by_key(uid, session)
            return self.to_document(entity) if entity else None

    async def set(self, uid: str, data: Dict[str, Any]) -> None:
        """
        Write the whole document, replacing any previous one under ``uid``.
        Fields absent from ``data`` are reset.
        """
        full = {name: data.get(name) for name in DOCUMENT_FIELDS}
        if full["other_cities_served"] is None:
            full["other_cities_served"] = []
        if full["role"] is None:
            full["role"] = "supplier"
        if full["is_approved"] is None:
            full["is_approved"] = False

        async with self.session_factory() as session, session.begin():
            entity = await self.get_by_key(uid, session, for_update=True)
            if entity is None:
                await self.add(Supplier(id=uid, **full), session)
            else:
                await self.assign(entity, full, session, fields=DOCUMENT_FIELDS)

    async def update(self, uid: str, data: Dict[str, Any]) -> None:
        """
        Overwrite only the given fields.

        Raises:
            LookupError: If no document exists under ``uid``.
            ValueError: If ``data`` names a field the document does not have.
        """
        unknown = set(data) - DOCUMENT_FIELDS
        if unknown:
            raise ValueError(f"supplier_document_unknown_fields:{sorted(unknown)}")

        async with self.session_factory() as session, session.begin():
            entity = await self.get_by_key(uid, session, for_update=True)
            if entity is None:
                raise LookupError(f"supplier_document_missing:{uid}")
            await self.assign(entity, data, session, fields=DOCUMENT_FIELDS)

    async def delete(self, uid: str) -> None:
        async with self.session_factory() as session, session.begin():
            await self.delete_by_key(uid, session)
