"""Restaurant repository."""
from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import Numeric, cast, func, or_, select

from food_express.infra.database.models.restaurant import Restaurant
from food_express.infra.database.repositories.base import BaseRepository, like_pattern

RATING_AVERAGE = func.coalesce(
    cast(Restaurant.rating_total, Numeric) / func.nullif(Restaurant.rating_count, 0), 0,
)

# "-" prefix sorts descending
RESTAURANT_SORTS = {
    "name": Restaurant.name,
    "rating": RATING_AVERAGE,
    "orders": Restaurant.total_orders,
    "newest": Restaurant.created_at,
}


class RestaurantRepository(BaseRepository[Restaurant]):
    model = Restaurant

    async def list_all(
        self,
        *,
        cuisines: Optional[Sequence[str]] = None,
        search: Optional[str] = None,
        min_rating: Optional[Decimal] = None,
        active_only: bool = True,
        sort: str = "-rating",
        skip: int = 0,
        limit: int = 25,
    ) -> List[Restaurant]:
        """Filtered page of restaurants. *sort* must be a RESTAURANT_SORTS key, optionally "-"-prefixed."""
        column = RESTAURANT_SORTS[sort.lstrip("-")]
        order = column.desc() if sort.startswith("-") else column.asc()
        stmt = select(Restaurant).order_by(order, Restaurant.name)
        if active_only:
            stmt = stmt.where(Restaurant.is_active.is_(True))
        if cuisines:
            stmt = stmt.where(Restaurant.cuisine.overlap(list(cuisines)))
        if search:
            pattern = like_pattern(search)
            stmt = stmt.where(or_(
                Restaurant.name.ilike(pattern, escape="\\"),
                Restaurant.description.ilike(pattern, escape="\\"),
            ))
        if min_rating is not None:
            stmt = stmt.where(RATING_AVERAGE >= min_rating)
        stmt = stmt.offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def ids_owned_by(self, owner_id: UUID) -> List[UUID]:
        stmt = select(Restaurant.id).where(Restaurant.owner_id == owner_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
