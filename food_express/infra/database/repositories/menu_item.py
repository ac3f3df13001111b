"""MenuItem repository."""
from __future__ import annotations

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, select

from food_express.infra.database.models.menu_item import MenuItem
from food_express.infra.database.models.restaurant import Restaurant
from food_express.infra.database.repositories.base import BaseRepository, like_pattern


class MenuItemRepository(BaseRepository[MenuItem]):
    model = MenuItem

    async def list_by_restaurant(
        self,
        restaurant_id: UUID,
        *,
        category: Optional[str] = None,
        available_only: bool = False,
    ) -> List[MenuItem]:
        stmt = (
            select(MenuItem)
            .where(MenuItem.restaurant_id == restaurant_id)
            .order_by(MenuItem.category, MenuItem.name)
        )
        if category:
            stmt = stmt.where(MenuItem.category == category)
        if available_only:
            stmt = stmt.where(MenuItem.is_available.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def search(
        self,
        *,
        text: Optional[str] = None,
        category: Optional[str] = None,
        price_min: Optional[Decimal] = None,
        price_max: Optional[Decimal] = None,
        restaurant_id: Optional[UUID] = None,
        limit: int = 50,
    ) -> List[MenuItem]:
        """Available items of active restaurants, popular first."""
        stmt = (
            select(MenuItem)
            .join(Restaurant, Restaurant.id == MenuItem.restaurant_id)
            .where(MenuItem.is_available.is_(True), Restaurant.is_active.is_(True))
            .order_by(MenuItem.is_popular.desc(), MenuItem.name)
        )
        if text:
            pattern = like_pattern(text)
            stmt = stmt.where(or_(
                MenuItem.name.ilike(pattern, escape="\\"),
                MenuItem.description.ilike(pattern, escape="\\"),
            ))
        if category:
            stmt = stmt.where(MenuItem.category == category)
        if price_min is not None:
            stmt = stmt.where(MenuItem.price >= price_min)
        if price_max is not None:
            stmt = stmt.where(MenuItem.price <= price_max)
        if restaurant_id is not None:
            stmt = stmt.where(MenuItem.restaurant_id == restaurant_id)
        result = await self.session.execute(stmt.limit(limit))
        return list(result.scalars().all())
