"""CatalogService: restaurants and menu items, the source of truth for prices."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from food_express.core.exceptions import NotFoundError, ResourceInUseError, ValidationError
from food_express.infra.database.errors import translate_db_errors
from food_express.infra.database.models.menu_item import MenuItem
from food_express.infra.database.models.restaurant import Restaurant
from food_express.infra.database.repositories.menu_item import MenuItemRepository
from food_express.infra.database.repositories.order import OrderRepository
from food_express.infra.database.repositories.restaurant import RESTAURANT_SORTS, RestaurantRepository
from food_express.ordering.access import AccessPolicy, Capability
from food_express.ordering.pricing import round_money, to_decimal
from food_express.ordering.types import Actor, Role

logger = logging.getLogger(__name__)

# Columns a restaurant owner may edit; counters are maintained by the order engine only
_RESTAURANT_FIELDS = {
    "name", "description", "cuisine", "address", "contact", "delivery_minutes", "is_active",
}
_MENU_ITEM_FIELDS = {
    "name", "description", "category", "price", "is_available", "is_popular",
    "preparation_time", "customization_options", "allergens",
}


def _normalize_options(options: Optional[List[Dict[str, Any]]]) -> List[Dict[str, str]]:
    """Validate customization options and store prices as strings of cents."""
    out: List[Dict[str, str]] = []
    seen: set[str] = set()
    for opt in options or []:
        name = str(opt.get("name") or "").strip()
        if not name:
            raise ValidationError("Customization option needs a name", details={"option": opt})
        if name in seen:
            raise ValidationError("Duplicate customization option", details={"name": name})
        price = round_money(to_decimal(opt.get("price", 0), "price"))
        if price < 0:
            raise ValidationError("Customization price cannot be negative", details={"name": name})
        seen.add(name)
        out.append({"name": name, "price": str(price)})
    return out


def _check_sort(sort: str) -> str:
    if sort.lstrip("-") not in RESTAURANT_SORTS:
        raise ValidationError(
            f"Unknown sort {sort!r}",
            details={"allowed": sorted(RESTAURANT_SORTS)},
        )
    return sort


def _clean_menu_item_data(data: Dict[str, Any]) -> Dict[str, Any]:
    clean = {k: v for k, v in data.items() if k in _MENU_ITEM_FIELDS}
    if "price" in clean:
        price = round_money(to_decimal(clean["price"], "price"))
        if price < 0:
            raise ValidationError("Price cannot be negative", details={"price": str(price)})
        clean["price"] = price
    if "customization_options" in clean:
        clean["customization_options"] = _normalize_options(clean["customization_options"])
    if "preparation_time" in clean and (clean["preparation_time"] or 0) < 0:
        raise ValidationError("Preparation time cannot be negative")
    return clean


class CatalogService:
    def __init__(self, session: AsyncSession, *, access: Optional[AccessPolicy] = None) -> None:
        self._restaurants = RestaurantRepository(session)
        self._items = MenuItemRepository(session)
        self._orders = OrderRepository(session)
        self._access = access or AccessPolicy()

    # ── Lookups used by the order engine ───────────────────────────────────────

    async def get_menu_item(self, id: UUID) -> Optional[MenuItem]:
        async with translate_db_errors("get_menu_item"):
            return await self._items.get_by_id(id)

    async def require_menu_item(self, id: UUID) -> MenuItem:
        item = await self.get_menu_item(id)
        if item is None:
            raise NotFoundError("Menu item not found", details={"menu_item_id": str(id)})
        return item

    async def get_restaurant(self, id: UUID) -> Restaurant:
        async with translate_db_errors("get_restaurant"):
            restaurant = await self._restaurants.get_by_id(id)
        if restaurant is None:
            raise NotFoundError("Restaurant not found", details={"restaurant_id": str(id)})
        return restaurant

    # ── Restaurants ───────────────────────────────────────────────────────────

    async def list_restaurants(
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
        """Browse restaurants; best rated first unless *sort* says otherwise."""
        async with translate_db_errors("list_restaurants"):
            return await self._restaurants.list_all(
                cuisines=[c.strip() for c in cuisines or [] if c.strip()],
                search=(search or "").strip() or None,
                min_rating=min_rating,
                active_only=active_only,
                sort=_check_sort(sort),
                skip=skip,
                limit=limit,
            )

    async def create_restaurant(self, actor: Actor, data: Dict[str, Any]) -> Restaurant:
        """Create a restaurant owned by *actor*; an admin may name another owner."""
        self._access.require(actor, Capability.MANAGE_CATALOG)
        clean = {k: v for k, v in data.items() if k in _RESTAURANT_FIELDS}
        owner_id = data.get("owner_id") if actor.role is Role.ADMIN else None
        clean["owner_id"] = owner_id or actor.id
        async with translate_db_errors("create_restaurant"):
            restaurant = await self._restaurants.create(clean)
        logger.info(
            "CatalogService: created restaurant %s (%s) owner=%s",
            restaurant.id, restaurant.name, restaurant.owner_id,
        )
        return restaurant

    async def update_restaurant(
        self, id: UUID, actor: Actor, data: Dict[str, Any],
    ) -> Restaurant:
        restaurant = await self.get_restaurant(id)
        self._access.require(
            actor, Capability.MANAGE_CATALOG, restaurant_owner_id=restaurant.owner_id,
        )
        clean = {k: v for k, v in data.items() if k in _RESTAURANT_FIELDS}
        if actor.role is Role.ADMIN and data.get("owner_id"):
            clean["owner_id"] = data["owner_id"]
        for attr, value in clean.items():
            setattr(restaurant, attr, value)
        async with translate_db_errors("update_restaurant"):
            restaurant = await self._restaurants.save(restaurant)
        logger.info("CatalogService: updated restaurant %s fields=%s", id, sorted(clean))
        return restaurant

    async def delete_restaurant(self, id: UUID, actor: Actor) -> None:
        """Delete a restaurant and its menu. Restaurants with orders can only be deactivated."""
        restaurant = await self.get_restaurant(id)
        self._access.require(
            actor, Capability.MANAGE_CATALOG, restaurant_owner_id=restaurant.owner_id,
        )
        async with translate_db_errors("delete_restaurant"):
            if await self._orders.count_filtered(restaurant_ids=[restaurant.id]):
                raise ResourceInUseError(
                    "Restaurant has orders; deactivate it instead",
                    details={"restaurant_id": str(id)},
                )
            await self._restaurants.delete(restaurant.id)
        logger.warning(
            "CatalogService: deleted restaurant %s (%s) by %s %s",
            id, restaurant.name, actor.role.value, actor.id,
        )

    # ── Menu items ────────────────────────────────────────────────────────────

    async def list_menu_items(
        self,
        restaurant_id: UUID,
        *,
        category: Optional[str] = None,
        available_only: bool = False,
    ) -> List[MenuItem]:
        await self.get_restaurant(restaurant_id)
        async with translate_db_errors("list_menu_items"):
            return await self._items.list_by_restaurant(
                restaurant_id, category=category, available_only=available_only,
            )

    async def search_menu_items(
        self,
        *,
        text: Optional[str] = None,
        category: Optional[str] = None,
        price_min: Any = None,
        price_max: Any = None,
        restaurant_id: Optional[UUID] = None,
        limit: int = 50,
    ) -> List[MenuItem]:
        low = to_decimal(price_min, "price_min") if price_min is not None else None
        high = to_decimal(price_max, "price_max") if price_max is not None else None
        if low is not None and high is not None and low > high:
            raise ValidationError(
                "price_min cannot exceed price_max",
                details={"price_min": str(low), "price_max": str(high)},
            )
        async with translate_db_errors("search_menu_items"):
            return await self._items.search(
                text=(text or "").strip() or None,
                category=category,
                price_min=low,
                price_max=high,
                restaurant_id=restaurant_id,
                limit=limit,
            )

    async def create_menu_item(
        self, actor: Actor, restaurant_id: UUID, data: Dict[str, Any],
    ) -> MenuItem:
        restaurant = await self.get_restaurant(restaurant_id)
        self._access.require(
            actor, Capability.MANAGE_CATALOG, restaurant_owner_id=restaurant.owner_id,
        )
        clean = _clean_menu_item_data(data)
        if "price" not in clean:
            raise ValidationError("Menu item needs a price")
        clean["restaurant_id"] = restaurant.id
        async with translate_db_errors("create_menu_item"):
            item = await self._items.create(clean)
        logger.info(
            "CatalogService: created menu item %s (%s) for restaurant %s",
            item.id, item.name, restaurant.id,
        )
        return item

    async def update_menu_item(
        self, id: UUID, actor: Actor, data: Dict[str, Any],
    ) -> MenuItem:
        item = await self.require_menu_item(id)
        restaurant = await self.get_restaurant(item.restaurant_id)
        self._access.require(
            actor, Capability.MANAGE_CATALOG, restaurant_owner_id=restaurant.owner_id,
        )
        clean = _clean_menu_item_data(data)
        for attr, value in clean.items():
            setattr(item, attr, value)
        async with translate_db_errors("update_menu_item"):
            item = await self._items.save(item)
        logger.info("CatalogService: updated menu item %s fields=%s", id, sorted(clean))
        return item

    async def delete_menu_item(self, id: UUID, actor: Actor) -> None:
        """Remove an item from the menu. Placed orders keep their own snapshot."""
        item = await self.require_menu_item(id)
        restaurant = await self.get_restaurant(item.restaurant_id)
        self._access.require(
            actor, Capability.MANAGE_CATALOG, restaurant_owner_id=restaurant.owner_id,
        )
        async with translate_db_errors("delete_menu_item"):
            await self._items.delete(item.id)
        logger.info(
            "CatalogService: deleted menu item %s (%s) from restaurant %s",
            id, item.name, restaurant.id,
        )
