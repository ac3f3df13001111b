"""Orders API: place orders, move them through their lifecycle, query and report."""
from __future__ import annotations

from typing import Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from food_express.api.dependencies import get_actor, get_order_service
from food_express.api.schemas.orders import (
    CancelRequest,
    DriverAssignRequest,
    OrderCreateRequest,
    OrderListResponse,
    OrderResponse,
    OrderStatsResponse,
    RatingRequest,
    RefundRequest,
    StatusUpdateRequest,
)
from food_express.config.app import DEFAULT_ORDER_RATE_LIMIT, AppConfig
from food_express.ordering.types import Actor, DeliveryAddress, LineRequest, Scores
from food_express.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])

limiter = Limiter(key_func=get_remote_address)
_rate_limits: Dict[str, str] = {"create_order": DEFAULT_ORDER_RATE_LIMIT}


def configure_rate_limits(config: AppConfig) -> None:
    """Apply the app-scoped order placement limit; called once from the lifespan."""
    _rate_limits["create_order"] = config.order_rate_limit


def order_rate_limit() -> str:
    # evaluated by slowapi on every request
    return _rate_limits["create_order"]


def _page(orders, total: int, skip: int, limit: int) -> OrderListResponse:
    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in orders],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(order_rate_limit)
async def create_order(
    request: Request,
    body: OrderCreateRequest,
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    order = await svc.create_order(
        actor,
        body.restaurant_id,
        [
            LineRequest(
                menu_item_id=line.menu_item_id,
                quantity=line.quantity,
                customizations=list(line.customizations),
                special_instructions=line.special_instructions,
            )
            for line in body.items
        ],
        DeliveryAddress(**body.delivery_address.model_dump()),
        body.payment_method,
        body.special_instructions,
        tip=body.tip,
        discount=body.discount,
    )
    return OrderResponse.model_validate(order)


@router.get("", response_model=OrderListResponse)
async def list_orders(
    status: Optional[str] = None,
    restaurant_id: Optional[UUID] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=25, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    orders, total = await svc.list_orders(
        actor, status=status, restaurant_id=restaurant_id, skip=skip, limit=limit,
    )
    return _page(orders, total, skip, limit)


@router.get("/mine", response_model=OrderListResponse)
async def list_my_orders(
    status: Optional[str] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=25, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    orders, total = await svc.list_my_orders(actor, status=status, skip=skip, limit=limit)
    return _page(orders, total, skip, limit)


@router.get("/stats", response_model=OrderStatsResponse)
async def order_stats(
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    return OrderStatsResponse(**await svc.order_stats(actor))


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    return OrderResponse.model_validate(await svc.get_order(order_id, actor))


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    body: StatusUpdateRequest,
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    order = await svc.advance_status(order_id, body.status, actor, note=body.note)
    return OrderResponse.model_validate(order)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: UUID,
    body: CancelRequest,
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    order = await svc.cancel_order(order_id, body.reason, actor)
    return OrderResponse.model_validate(order)


@router.post("/{order_id}/rating", response_model=OrderResponse)
async def rate_order(
    order_id: UUID,
    body: RatingRequest,
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    scores = Scores(food=body.food, delivery=body.delivery, overall=body.overall)
    order = await svc.rate_order(order_id, scores, body.comment, actor)
    return OrderResponse.model_validate(order)


@router.post("/{order_id}/driver", response_model=OrderResponse)
async def assign_driver(
    order_id: UUID,
    body: DriverAssignRequest,
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    order = await svc.assign_driver(order_id, body.driver_id, actor)
    return OrderResponse.model_validate(order)


@router.post("/{order_id}/refund", response_model=OrderResponse)
async def record_refund(
    order_id: UUID,
    body: RefundRequest,
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    order = await svc.record_refund(order_id, body.amount, body.reason, actor)
    return OrderResponse.model_validate(order)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: UUID,
    actor: Actor = Depends(get_actor),
    svc: OrderService = Depends(get_order_service),
):
    await svc.delete_order(order_id, actor)
