"""Pydantic v2 schemas for the Restaurants and Menu APIs."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class RestaurantCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    cuisine: List[str] = Field(default_factory=list)
    address: Dict[str, Any] = Field(default_factory=dict)
    contact: Dict[str, Any] = Field(default_factory=dict)
    delivery_minutes: Optional[int] = Field(default=None, ge=0, le=240)
    is_active: bool = True
    # Only honoured for admins
    owner_id: Optional[UUID] = None


class RestaurantPatchRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    cuisine: Optional[List[str]] = None
    address: Optional[Dict[str, Any]] = None
    contact: Optional[Dict[str, Any]] = None
    delivery_minutes: Optional[int] = Field(default=None, ge=0, le=240)
    is_active: Optional[bool] = None
    owner_id: Optional[UUID] = None


class RestaurantResponse(BaseModel):
    id: UUID
    owner_id: UUID
    name: str
    description: str
    cuisine: List[str]
    address: Dict[str, Any]
    contact: Dict[str, Any]
    delivery_minutes: Optional[int] = None
    is_active: bool
    total_orders: int
    total_revenue: Decimal
    rating_count: int
    rating_average: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CustomizationOption(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Decimal("0")


class MenuItemCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    category: str = Field(..., min_length=1, max_length=32)
    price: Decimal
    is_available: bool = True
    is_popular: bool = False
    preparation_time: int = Field(default=15, ge=0, le=240)
    customization_options: List[CustomizationOption] = Field(default_factory=list)
    allergens: List[str] = Field(default_factory=list)


class MenuItemPatchRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = Field(default=None, min_length=1, max_length=32)
    price: Optional[Decimal] = None
    is_available: Optional[bool] = None
    is_popular: Optional[bool] = None
    preparation_time: Optional[int] = Field(default=None, ge=0, le=240)
    customization_options: Optional[List[CustomizationOption]] = None
    allergens: Optional[List[str]] = None


class MenuItemResponse(BaseModel):
    id: UUID
    restaurant_id: UUID
    name: str
    description: str
    category: str
    price: Decimal
    is_available: bool
    is_popular: bool
    preparation_time: int
    customization_options: List[Dict[str, Any]]
    allergens: List[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
