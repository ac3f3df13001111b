"""Generic async repository for SQLAlchemy 2.0."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, ClassVar, Generic, Mapping, Optional, TypeVar, Union
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

ModelT = TypeVar("ModelT")


def like_pattern(term: str) -> str:
    """Case-insensitive substring pattern with LIKE wildcards escaped (use with escape="\\")."""
    escaped = term.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class BaseRepository(Generic[ModelT]):
    model: ClassVar[type]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, id: UUID) -> Optional[ModelT]:
        return await self.session.get(self.model, id)  # type: ignore[return-value]

    async def create(self, data: dict[str, Any]) -> ModelT:
        instance = self.model(**data)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance  # type: ignore[return-value]

    async def save(self, instance: ModelT) -> ModelT:
        """Flush pending changes on an already-loaded instance (version-checked for Order)."""
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, id: UUID) -> bool:
        instance = await self.get_by_id(id)
        if instance is None:
            return False
        await self.session.delete(instance)
        await self.session.flush()
        return True

    async def atomic_increment(
        self,
        id: UUID,
        deltas: Mapping[str, Union[int, Decimal]],
    ) -> bool:
        """``UPDATE … SET f = f + delta, …`` in one statement; no read-modify-write."""
        values = {field: getattr(self.model, field) + delta for field, delta in deltas.items()}
        stmt = (
            update(self.model)
            .where(self.model.id == id)
            .values(values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0
