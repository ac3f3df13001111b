"""OrderService: create orders and drive them through their lifecycle.

Every state change follows the same path: load the order, check access,
apply the pure transition from ``food_express.ordering.lifecycle`` and flush
under the order's optimistic version check. A lost race surfaces as
ConflictError; the caller decides whether to reload and retry.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from food_express.config.app import AppConfig
from food_express.core.exceptions import (
    InvalidTransitionError,
    ItemNotFoundError,
    ItemUnavailableError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from food_express.infra.database.errors import translate_db_errors
from food_express.infra.database.models.order import Order
from food_express.infra.database.repositories.order import OrderRepository
from food_express.infra.database.repositories.restaurant import RestaurantRepository
from food_express.ordering import lifecycle
from food_express.ordering.access import AccessPolicy, Capability
from food_express.ordering.numbering import OrderNumberGenerator
from food_express.ordering.pricing import calculate_pricing, price_line, round_money
from food_express.ordering.types import (
    Actor,
    Clock,
    DeliveryAddress,
    LineRequest,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PricedLine,
    Role,
    Scores,
    utcnow,
)
from food_express.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


def _parse_payment_method(value: Any) -> PaymentMethod:
    try:
        return PaymentMethod(value)
    except ValueError:
        raise ValidationError(
            f"Unknown payment method {value!r}",
            details={"allowed": [m.value for m in PaymentMethod]},
        ) from None


def _option_prices(item: Any) -> Dict[str, Decimal]:
    return {
        opt["name"]: Decimal(str(opt.get("price", "0")))
        for opt in (item.customization_options or [])
    }


class OrderService:
    def __init__(
        self,
        session: AsyncSession,
        config: AppConfig,
        *,
        catalog: Optional[CatalogService] = None,
        access: Optional[AccessPolicy] = None,
        numbers: Optional[OrderNumberGenerator] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._repo = OrderRepository(session)
        self._restaurants = RestaurantRepository(session)
        self._access = access or AccessPolicy()
        self._catalog = catalog or CatalogService(session, access=self._access)
        self._pricing = config.pricing
        self._clock = clock or utcnow
        self._numbers = numbers or OrderNumberGenerator(
            self._repo.next_order_sequence,
            prefix=self._pricing.order_number_prefix,
            clock=self._clock,
        )

    # ── Helpers ───────────────────────────────────────────────────────────────

    async def _load(self, order_id: UUID) -> Order:
        async with translate_db_errors("load_order"):
            order = await self._repo.get_by_id(order_id)
        if order is None:
            raise NotFoundError("Order not found", details={"order_id": str(order_id)})
        return order

    async def _authorize(self, actor: Actor, capability: Capability, order: Order) -> None:
        owner_id = None
        if actor.role is Role.RESTAURANT:
            async with translate_db_errors("load_restaurant"):
                restaurant = await self._restaurants.get_by_id(order.restaurant_id)
            owner_id = restaurant.owner_id if restaurant is not None else None
        self._access.require(actor, capability, order=order, restaurant_owner_id=owner_id)

    async def _save(self, order: Order, operation: str) -> Order:
        async with translate_db_errors(operation):
            return await self._repo.save(order)

    async def _scope(
        self, actor: Actor, restaurant_id: Optional[UUID] = None,
    ) -> Dict[str, Any]:
        """Repository filters limiting *actor* to the orders they may see."""
        if actor.role is Role.CUSTOMER:
            scope: Dict[str, Any] = {"customer_id": actor.id}
            if restaurant_id is not None:
                scope["restaurant_ids"] = [restaurant_id]
            return scope
        if actor.role is Role.DELIVERY:
            scope = {"driver_id": actor.id}
            if restaurant_id is not None:
                scope["restaurant_ids"] = [restaurant_id]
            return scope
        if actor.role is Role.RESTAURANT:
            async with translate_db_errors("load_owned_restaurants"):
                owned = await self._restaurants.ids_owned_by(actor.id)
            if restaurant_id is not None:
                if restaurant_id not in owned:
                    raise UnauthorizedError(
                        "Not authorized to view orders of this restaurant",
                        details={"restaurant_id": str(restaurant_id)},
                    )
                owned = [restaurant_id]
            return {"restaurant_ids": owned}
        return {"restaurant_ids": [restaurant_id]} if restaurant_id is not None else {}

    # ── Creation ──────────────────────────────────────────────────────────────

    async def create_order(
        self,
        actor: Actor,
        restaurant_id: UUID,
        line_requests: Sequence[LineRequest],
        delivery_address: DeliveryAddress,
        payment_method: Any,
        special_instructions: Optional[str] = None,
        *,
        tip: Any = 0,
        discount: Any = 0,
    ) -> Order:
        """Validate the cart against the catalog, price it and persist a pending order.

        Prices, names and customization prices are snapshotted from the catalog;
        nothing the client sends is trusted beyond ids, quantities and option names.
        """
        self._access.require(actor, Capability.PLACE_ORDER)

        if not line_requests:
            raise ValidationError("Order must contain at least one item")
        for index, line in enumerate(line_requests):
            line.validate(index)
        delivery_address.validate()
        method = _parse_payment_method(payment_method)

        restaurant = await self._catalog.get_restaurant(restaurant_id)
        if not restaurant.is_active:
            raise ValidationError(
                "Restaurant is not accepting orders",
                details={"restaurant_id": str(restaurant_id)},
            )

        snapshots: List[Dict[str, Any]] = []
        line_subtotals: List[Decimal] = []
        prep_minutes: List[int] = []
        for index, line in enumerate(line_requests):
            item = await self._catalog.get_menu_item(line.menu_item_id)
            if item is None:
                raise ItemNotFoundError(
                    "Menu item not found",
                    details={"line": index, "menu_item_id": str(line.menu_item_id)},
                )
            if item.restaurant_id != restaurant.id:
                raise ValidationError(
                    "Menu item belongs to a different restaurant",
                    details={"line": index, "menu_item_id": str(item.id)},
                )
            if not item.is_available:
                raise ItemUnavailableError(
                    f"{item.name} is currently unavailable",
                    details={"line": index, "menu_item_id": str(item.id)},
                )

            options = _option_prices(item)
            unknown = [name for name in line.customizations if name not in options]
            if unknown:
                raise ValidationError(
                    "Unknown customization for this item",
                    details={"line": index, "customizations": unknown},
                )
            chosen = [{"name": name, "price": options[name]} for name in line.customizations]

            unit_price = Decimal(str(item.price))
            subtotal = price_line(PricedLine(
                unit_price=unit_price,
                quantity=line.quantity,
                customization_prices=tuple(c["price"] for c in chosen),
            ))
            line_subtotals.append(subtotal)
            prep_minutes.append(item.preparation_time or 0)
            snapshots.append({
                "menuItemId": str(item.id),
                "name": item.name,
                "price": str(unit_price),
                "quantity": line.quantity,
                "customizations": [{"name": c["name"], "price": str(c["price"])} for c in chosen],
                "specialInstructions": line.special_instructions or "",
                "subtotal": str(subtotal),
            })

        pricing = calculate_pricing(line_subtotals, self._pricing, tip=tip, discount=discount)
        now = self._clock()
        delivery_minutes = restaurant.delivery_minutes
        if delivery_minutes is None:
            delivery_minutes = self._pricing.default_delivery_minutes
        estimated = lifecycle.estimate_delivery_time(now, prep_minutes, delivery_minutes)

        async with translate_db_errors("create_order"):
            order_number = await self._numbers.next_order_number()
            order = await self._repo.create({
                "order_number": order_number,
                "customer_id": actor.id,
                "restaurant_id": restaurant.id,
                "line_items": snapshots,
                **pricing.to_dict(),
                "delivery_address": delivery_address.to_dict(),
                "status": OrderStatus.PENDING.value,
                "payment_method": method.value,
                "payment_status": PaymentStatus.PENDING.value,
                "special_instructions": (special_instructions or "").strip() or None,
                "estimated_delivery_time": estimated,
                "tracking_history": [],
            })
            await self._restaurants.atomic_increment(
                restaurant.id, {"total_orders": 1, "total_revenue": pricing.total},
            )

        logger.info(
            "OrderService: created order %s (%s) customer=%s restaurant=%s total=%s",
            order.id, order.order_number, actor.id, restaurant.id, pricing.total,
        )
        return order

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def advance_status(
        self,
        order_id: UUID,
        new_status: Any,
        actor: Actor,
        note: Optional[str] = None,
    ) -> Order:
        target = lifecycle.parse_status(new_status)
        order = await self._load(order_id)
        await self._authorize(actor, Capability.ADVANCE_STATUS, order)
        lifecycle.ensure_transition(order.status, target)
        self._access.require_status_target(actor, target)

        previous = order.status
        lifecycle.advance_status(
            order, target, self._clock(), note=note, actor_role=actor.role.value,
        )
        order = await self._save(order, "advance_status")
        logger.info(
            "OrderService: order %s (%s) %s -> %s by %s %s",
            order.id, order.order_number, previous, order.status, actor.role.value, actor.id,
        )
        return order

    async def cancel_order(self, order_id: UUID, reason: Optional[str], actor: Actor) -> Order:
        order = await self._load(order_id)
        await self._authorize(actor, Capability.CANCEL_ORDER, order)
        lifecycle.cancel(order, reason or "", actor.role.value, self._clock())
        order = await self._save(order, "cancel_order")
        logger.info(
            "OrderService: order %s (%s) cancelled by %s %s",
            order.id, order.order_number, actor.role.value, actor.id,
        )
        return order

    async def rate_order(
        self,
        order_id: UUID,
        scores: Scores,
        comment: Optional[str],
        actor: Actor,
    ) -> Order:
        order = await self._load(order_id)
        await self._authorize(actor, Capability.RATE_ORDER, order)
        lifecycle.rate(order, scores, comment, self._clock())
        async with translate_db_errors("rate_order"):
            order = await self._repo.save(order)
            await self._restaurants.atomic_increment(
                order.restaurant_id,
                {"rating_count": 1, "rating_total": order.rating["overall"]},
            )
        logger.info(
            "OrderService: order %s (%s) rated overall=%s",
            order.id, order.order_number, order.rating["overall"],
        )
        return order

    async def assign_driver(self, order_id: UUID, driver_id: UUID, actor: Actor) -> Order:
        order = await self._load(order_id)
        await self._authorize(actor, Capability.ASSIGN_DRIVER, order)
        if lifecycle.is_terminal(order.status):
            raise InvalidTransitionError(
                f"Cannot assign a driver to an order that is {order.status}",
                details={"status": order.status},
            )
        order.driver_id = driver_id
        order = await self._save(order, "assign_driver")
        logger.info(
            "OrderService: order %s (%s) assigned to driver %s",
            order.id, order.order_number, driver_id,
        )
        return order

    async def record_refund(
        self,
        order_id: UUID,
        amount: Any,
        reason: Optional[str],
        actor: Actor,
    ) -> Order:
        order = await self._load(order_id)
        await self._authorize(actor, Capability.RECORD_REFUND, order)
        lifecycle.record_refund(order, amount, reason, actor.role.value, self._clock())
        order = await self._save(order, "record_refund")
        logger.info(
            "OrderService: order %s (%s) refunded %s",
            order.id, order.order_number, order.refund["amount"],
        )
        return order

    async def delete_order(self, order_id: UUID, actor: Actor) -> None:
        order = await self._load(order_id)
        await self._authorize(actor, Capability.DELETE_ORDER, order)
        async with translate_db_errors("delete_order"):
            await self._repo.delete(order.id)
        logger.warning(
            "OrderService: order %s (%s) deleted by %s %s",
            order.id, order.order_number, actor.role.value, actor.id,
        )

    # ── Queries ───────────────────────────────────────────────────────────────

    async def get_order(self, order_id: UUID, actor: Actor) -> Order:
        order = await self._load(order_id)
        await self._authorize(actor, Capability.VIEW_ORDER, order)
        return order

    async def list_orders(
        self,
        actor: Actor,
        *,
        status: Optional[str] = None,
        restaurant_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 25,
    ) -> Tuple[List[Order], int]:
        """Orders visible to *actor*, newest first, plus the total matching count."""
        self._access.require(actor, Capability.VIEW_ORDER)
        status_value = lifecycle.parse_status(status).value if status else None
        scope = await self._scope(actor, restaurant_id)
        if scope.get("restaurant_ids") == []:
            return [], 0
        async with translate_db_errors("list_orders"):
            orders = await self._repo.list_filtered(
                **scope, status=status_value, skip=skip, limit=limit,
            )
            total = await self._repo.count_filtered(**scope, status=status_value)
        return orders, total

    async def list_my_orders(
        self,
        actor: Actor,
        *,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 25,
    ) -> Tuple[List[Order], int]:
        """Orders the actor placed as a customer."""
        self._access.require(actor, Capability.VIEW_ORDER)
        status_value = lifecycle.parse_status(status).value if status else None
        async with translate_db_errors("list_my_orders"):
            orders = await self._repo.list_filtered(
                customer_id=actor.id, status=status_value, skip=skip, limit=limit,
            )
            total = await self._repo.count_filtered(customer_id=actor.id, status=status_value)
        return orders, total

    async def order_stats(self, actor: Actor) -> Dict[str, Any]:
        """Counts per status plus revenue and average order value over all orders in scope."""
        self._access.require(actor, Capability.VIEW_STATS)
        restaurant_ids = None
        async with translate_db_errors("order_stats"):
            if actor.role is Role.RESTAURANT:
                restaurant_ids = await self._restaurants.ids_owned_by(actor.id)
            summary = await self._repo.status_summary(restaurant_ids=restaurant_ids)

        by_status = {s.value: 0 for s in OrderStatus}
        total_orders = 0
        revenue = Decimal("0")
        for status, row in summary.items():
            by_status[status] = row["count"]
            total_orders += row["count"]
            revenue += row["revenue"]
        average = round_money(revenue / total_orders) if total_orders else Decimal("0.00")
        return {
            "total_orders": total_orders,
            "total_revenue": round_money(revenue),
            "average_order_value": average,
            "by_status": by_status,
        }
