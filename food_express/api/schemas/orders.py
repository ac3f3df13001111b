"""Pydantic v2 schemas for the Orders API."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class LineItemRequest(BaseModel):
    menu_item_id: UUID
    quantity: int
    customizations: List[str] = Field(default_factory=list)
    special_instructions: str = ""


class DeliveryAddressRequest(BaseModel):
    street: str
    city: str
    state: str
    zip_code: str
    instructions: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


class OrderCreateRequest(BaseModel):
    restaurant_id: UUID
    items: List[LineItemRequest]
    delivery_address: DeliveryAddressRequest
    payment_method: str
    special_instructions: Optional[str] = Field(default=None, max_length=500)
    tip: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")


class StatusUpdateRequest(BaseModel):
    status: str
    note: Optional[str] = Field(default=None, max_length=500)


class CancelRequest(BaseModel):
    reason: str = Field(default="", max_length=500)


class RatingRequest(BaseModel):
    food: int
    delivery: int
    overall: int
    comment: Optional[str] = Field(default=None, max_length=1000)


class DriverAssignRequest(BaseModel):
    driver_id: UUID


class RefundRequest(BaseModel):
    amount: Decimal
    reason: Optional[str] = Field(default=None, max_length=500)


class OrderResponse(BaseModel):
    id: UUID
    order_number: str
    customer_id: UUID
    restaurant_id: UUID
    driver_id: Optional[UUID] = None
    line_items: List[Dict[str, Any]]
    subtotal: Decimal
    tax: Decimal
    delivery_fee: Decimal
    service_fee: Decimal
    discount: Decimal
    tip: Decimal
    total: Decimal
    delivery_address: Dict[str, Any]
    status: str
    payment_method: str
    payment_status: str
    special_instructions: Optional[str] = None
    estimated_delivery_time: Optional[datetime] = None
    actual_delivery_time: Optional[datetime] = None
    tracking_history: List[Dict[str, Any]] = Field(default_factory=list)
    rating: Optional[Dict[str, Any]] = None
    cancellation: Optional[Dict[str, Any]] = None
    refund: Optional[Dict[str, Any]] = None
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OrderListResponse(BaseModel):
    items: List[OrderResponse]
    total: int
    skip: int
    limit: int


class OrderStatsResponse(BaseModel):
    total_orders: int
    total_revenue: Decimal
    average_order_value: Decimal
    by_status: Dict[str, int]
