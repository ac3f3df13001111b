"""Order repository."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import Select, func, select

from food_express.infra.database.models.order import ORDER_NUMBER_SEQ, Order
from food_express.infra.database.repositories.base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    model = Order

    def _filtered(
        self,
        stmt: Select,
        *,
        customer_id: Optional[UUID] = None,
        restaurant_ids: Optional[Sequence[UUID]] = None,
        driver_id: Optional[UUID] = None,
        status: Optional[str] = None,
    ) -> Select:
        if customer_id is not None:
            stmt = stmt.where(Order.customer_id == customer_id)
        if restaurant_ids is not None:
            stmt = stmt.where(Order.restaurant_id.in_(list(restaurant_ids)))
        if driver_id is not None:
            stmt = stmt.where(Order.driver_id == driver_id)
        if status:
            stmt = stmt.where(Order.status == status)
        return stmt

    async def list_filtered(
        self,
        *,
        customer_id: Optional[UUID] = None,
        restaurant_ids: Optional[Sequence[UUID]] = None,
        driver_id: Optional[UUID] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 25,
    ) -> List[Order]:
        stmt = self._filtered(
            select(Order),
            customer_id=customer_id,
            restaurant_ids=restaurant_ids,
            driver_id=driver_id,
            status=status,
        )
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_filtered(
        self,
        *,
        customer_id: Optional[UUID] = None,
        restaurant_ids: Optional[Sequence[UUID]] = None,
        driver_id: Optional[UUID] = None,
        status: Optional[str] = None,
    ) -> int:
        stmt = self._filtered(
            select(func.count()).select_from(Order),
            customer_id=customer_id,
            restaurant_ids=restaurant_ids,
            driver_id=driver_id,
            status=status,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def next_order_sequence(self) -> int:
        return await self.session.scalar(select(ORDER_NUMBER_SEQ.next_value()))

    async def status_summary(
        self,
        *,
        restaurant_ids: Optional[Sequence[UUID]] = None,
    ) -> Dict[str, Any]:
        """Order count and revenue per status, e.g. ``{"pending": {"count": 3, "revenue": Decimal}}``."""
        stmt = self._filtered(
            select(Order.status, func.count(), func.coalesce(func.sum(Order.total), 0)),
            restaurant_ids=restaurant_ids,
        ).group_by(Order.status)
        result = await self.session.execute(stmt)
        return {
            status: {"count": count, "revenue": Decimal(str(revenue))}
            for status, count, revenue in result.all()
        }
