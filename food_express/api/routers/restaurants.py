"""Restaurants API: catalog browsing and management, including menus."""
from __future__ import annotations

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from food_express.api.dependencies import get_actor, get_catalog_service
from food_express.api.schemas.restaurants import (
    MenuItemCreateRequest,
    MenuItemPatchRequest,
    MenuItemResponse,
    RestaurantCreateRequest,
    RestaurantPatchRequest,
    RestaurantResponse,
)
from food_express.ordering.types import Actor
from food_express.services.catalog_service import CatalogService

router = APIRouter(tags=["restaurants"])


@router.get("/restaurants", response_model=List[RestaurantResponse])
async def list_restaurants(
    cuisine: Optional[str] = Query(default=None, description="Comma-separated cuisines"),
    q: Optional[str] = Query(default=None, max_length=100),
    min_rating: Optional[Decimal] = Query(default=None, ge=0, le=5),
    sort: str = "-rating",
    active_only: bool = True,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=25, ge=1, le=100),
    svc: CatalogService = Depends(get_catalog_service),
):
    restaurants = await svc.list_restaurants(
        cuisines=cuisine.split(",") if cuisine else None,
        search=q,
        min_rating=min_rating,
        active_only=active_only,
        sort=sort,
        skip=skip,
        limit=limit,
    )
    return [RestaurantResponse.model_validate(r) for r in restaurants]


@router.post("/restaurants", response_model=RestaurantResponse, status_code=status.HTTP_201_CREATED)
async def create_restaurant(
    body: RestaurantCreateRequest,
    actor: Actor = Depends(get_actor),
    svc: CatalogService = Depends(get_catalog_service),
):
    restaurant = await svc.create_restaurant(actor, body.model_dump())
    return RestaurantResponse.model_validate(restaurant)


@router.get("/restaurants/{restaurant_id}", response_model=RestaurantResponse)
async def get_restaurant(
    restaurant_id: UUID,
    svc: CatalogService = Depends(get_catalog_service),
):
    return RestaurantResponse.model_validate(await svc.get_restaurant(restaurant_id))


@router.patch("/restaurants/{restaurant_id}", response_model=RestaurantResponse)
async def patch_restaurant(
    restaurant_id: UUID,
    body: RestaurantPatchRequest,
    actor: Actor = Depends(get_actor),
    svc: CatalogService = Depends(get_catalog_service),
):
    restaurant = await svc.update_restaurant(
        restaurant_id, actor, body.model_dump(exclude_unset=True),
    )
    return RestaurantResponse.model_validate(restaurant)


@router.delete("/restaurants/{restaurant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_restaurant(
    restaurant_id: UUID,
    actor: Actor = Depends(get_actor),
    svc: CatalogService = Depends(get_catalog_service),
):
    await svc.delete_restaurant(restaurant_id, actor)


@router.get("/restaurants/{restaurant_id}/menu", response_model=List[MenuItemResponse])
async def list_menu(
    restaurant_id: UUID,
    category: Optional[str] = None,
    available_only: bool = False,
    svc: CatalogService = Depends(get_catalog_service),
):
    items = await svc.list_menu_items(
        restaurant_id, category=category, available_only=available_only,
    )
    return [MenuItemResponse.model_validate(i) for i in items]


@router.post(
    "/restaurants/{restaurant_id}/menu",
    response_model=MenuItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_menu_item(
    restaurant_id: UUID,
    body: MenuItemCreateRequest,
    actor: Actor = Depends(get_actor),
    svc: CatalogService = Depends(get_catalog_service),
):
    item = await svc.create_menu_item(actor, restaurant_id, body.model_dump())
    return MenuItemResponse.model_validate(item)


# /menu-items/search must be registered before /menu-items/{item_id}
@router.get("/menu-items/search", response_model=List[MenuItemResponse])
async def search_menu_items(
    q: Optional[str] = Query(default=None, max_length=100),
    category: Optional[str] = None,
    price_min: Optional[Decimal] = Query(default=None, ge=0),
    price_max: Optional[Decimal] = Query(default=None, ge=0),
    restaurant_id: Optional[UUID] = None,
    limit: int = Query(default=50, ge=1, le=100),
    svc: CatalogService = Depends(get_catalog_service),
):
    items = await svc.search_menu_items(
        text=q,
        category=category,
        price_min=price_min,
        price_max=price_max,
        restaurant_id=restaurant_id,
        limit=limit,
    )
    return [MenuItemResponse.model_validate(i) for i in items]


@router.get("/menu-items/{item_id}", response_model=MenuItemResponse)
async def get_menu_item(
    item_id: UUID,
    svc: CatalogService = Depends(get_catalog_service),
):
    return MenuItemResponse.model_validate(await svc.require_menu_item(item_id))


@router.patch("/menu-items/{item_id}", response_model=MenuItemResponse)
async def patch_menu_item(
    item_id: UUID,
    body: MenuItemPatchRequest,
    actor: Actor = Depends(get_actor),
    svc: CatalogService = Depends(get_catalog_service),
):
    item = await svc.update_menu_item(item_id, actor, body.model_dump(exclude_unset=True))
    return MenuItemResponse.model_validate(item)


@router.delete("/menu-items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_menu_item(
    item_id: UUID,
    actor: Actor = Depends(get_actor),
    svc: CatalogService = Depends(get_catalog_service),
):
    await svc.delete_menu_item(item_id, actor)
