"""Access control: role capability sets plus per-order relationship checks.

The engine asks this collaborator before every state change. Role storage
and authentication live elsewhere; an ``Actor`` arrives already resolved.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional
from uuid import UUID

from food_express.core.exceptions import UnauthorizedError
from food_express.ordering.lifecycle import parse_status
from food_express.ordering.types import Actor, OrderStatus, Role

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    PLACE_ORDER = "place_order"
    VIEW_ORDER = "view_order"
    ADVANCE_STATUS = "advance_status"
    CANCEL_ORDER = "cancel_order"
    RATE_ORDER = "rate_order"
    ASSIGN_DRIVER = "assign_driver"
    RECORD_REFUND = "record_refund"
    DELETE_ORDER = "delete_order"
    VIEW_STATS = "view_stats"
    MANAGE_CATALOG = "manage_catalog"


ROLE_CAPABILITIES: Dict[Role, FrozenSet[Capability]] = {
    Role.CUSTOMER: frozenset({
        Capability.PLACE_ORDER,
        Capability.VIEW_ORDER,
        Capability.ADVANCE_STATUS,
        Capability.CANCEL_ORDER,
        Capability.RATE_ORDER,
    }),
    Role.RESTAURANT: frozenset({
        Capability.VIEW_ORDER,
        Capability.ADVANCE_STATUS,
        Capability.CANCEL_ORDER,
        Capability.ASSIGN_DRIVER,
        Capability.VIEW_STATS,
        Capability.MANAGE_CATALOG,
    }),
    Role.DELIVERY: frozenset({
        Capability.VIEW_ORDER,
        Capability.ADVANCE_STATUS,
    }),
    # only the ordering customer rates
    Role.ADMIN: frozenset(Capability) - {Capability.RATE_ORDER},
}

_ALL_TARGETS = frozenset(s for s in OrderStatus if s is not OrderStatus.PENDING)

STATUS_TARGETS: Dict[Role, FrozenSet[OrderStatus]] = {
    Role.CUSTOMER: frozenset({OrderStatus.CANCELLED}),
    Role.DELIVERY: frozenset({
        OrderStatus.PICKED_UP,
        OrderStatus.ON_THE_WAY,
        OrderStatus.DELIVERED,
    }),
    Role.RESTAURANT: _ALL_TARGETS,
    Role.ADMIN: _ALL_TARGETS,
}
"""Statuses each role may request through advance_status."""


class AccessPolicy:
    """Capability + relationship checks against the closed Role enum."""

    def __init__(
        self,
        capabilities: Optional[Dict[Role, FrozenSet[Capability]]] = None,
        status_targets: Optional[Dict[Role, FrozenSet[OrderStatus]]] = None,
    ) -> None:
        self._capabilities = capabilities or ROLE_CAPABILITIES
        self._status_targets = status_targets or STATUS_TARGETS

    def has_capability(self, actor: Actor, capability: Capability) -> bool:
        return capability in self._capabilities.get(actor.role, frozenset())

    @staticmethod
    def is_related(
        actor: Actor,
        *,
        order: Any = None,
        restaurant_owner_id: Optional[UUID] = None,
    ) -> bool:
        """Does *actor* stand in the required relationship to the order/restaurant?

        customer: owns the order; restaurant: owns the restaurant;
        delivery: is the assigned driver; admin: always.
        """
        if actor.role is Role.ADMIN:
            return True
        if actor.role is Role.CUSTOMER:
            return order is None or order.customer_id == actor.id
        if actor.role is Role.RESTAURANT:
            return restaurant_owner_id is not None and restaurant_owner_id == actor.id
        if actor.role is Role.DELIVERY:
            return order is not None and getattr(order, "driver_id", None) == actor.id
        return False

    def allows(
        self,
        actor: Actor,
        capability: Capability,
        *,
        order: Any = None,
        restaurant_owner_id: Optional[UUID] = None,
    ) -> bool:
        if not self.has_capability(actor, capability):
            return False
        if order is None and restaurant_owner_id is None:
            return True
        return self.is_related(actor, order=order, restaurant_owner_id=restaurant_owner_id)

    def require(
        self,
        actor: Actor,
        capability: Capability,
        *,
        order: Any = None,
        restaurant_owner_id: Optional[UUID] = None,
    ) -> None:
        if self.allows(actor, capability, order=order, restaurant_owner_id=restaurant_owner_id):
            return
        logger.info(
            "AccessPolicy: denied %s for %s %s",
            capability.value, actor.role.value, actor.id,
        )
        raise UnauthorizedError(
            f"Not authorized to {capability.value.replace('_', ' ')}",
            details={"role": actor.role.value, "capability": capability.value},
        )

    def require_status_target(self, actor: Actor, status: Any) -> None:
        target = parse_status(status)
        if target in self._status_targets.get(actor.role, frozenset()):
            return
        raise UnauthorizedError(
            f"A {actor.role.value} may not set status {target.value}",
            details={"role": actor.role.value, "status": target.value},
        )
