"""Tests for CatalogService: ownership-gated restaurant and menu management."""
from __future__ import annotations

import asyncio
import unittest
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from sqlalchemy.exc import OperationalError

from food_express.core.exceptions import (
    NotFoundError,
    ResourceInUseError,
    TransientError,
    UnauthorizedError,
    ValidationError,
)
from food_express.ordering.types import Actor, Role
from food_express.services.catalog_service import CatalogService


def _run(coro):
    return asyncio.run(coro)


def _make_service():
    svc = CatalogService(MagicMock())
    svc._restaurants.create = AsyncMock(side_effect=lambda data: SimpleNamespace(id=uuid4(), **data))
    svc._restaurants.save = AsyncMock(side_effect=lambda r: r)
    svc._items.create = AsyncMock(side_effect=lambda data: SimpleNamespace(id=uuid4(), **data))
    svc._items.save = AsyncMock(side_effect=lambda i: i)
    return svc


class TestRestaurants(unittest.TestCase):
    def setUp(self):
        self.svc = _make_service()
        self.owner = Actor(id=uuid4(), role=Role.RESTAURANT)
        self.restaurant = SimpleNamespace(id=uuid4(), owner_id=self.owner.id, name="Luigi's", is_active=True)
        self.svc._restaurants.get_by_id = AsyncMock(return_value=self.restaurant)

    def test_create_sets_owner_to_caller(self):
        r = _run(self.svc.create_restaurant(self.owner, {"name": "Pho 99", "owner_id": uuid4()}))
        self.assertEqual(r.owner_id, self.owner.id)

    def test_admin_may_create_for_someone_else(self):
        other = uuid4()
        admin = Actor(id=uuid4(), role=Role.ADMIN)
        r = _run(self.svc.create_restaurant(admin, {"name": "Pho 99", "owner_id": other}))
        self.assertEqual(r.owner_id, other)

    def test_customer_cannot_create(self):
        with self.assertRaises(UnauthorizedError):
            _run(self.svc.create_restaurant(Actor(id=uuid4(), role=Role.CUSTOMER), {"name": "x"}))

    def test_update_ignores_counters(self):
        r = _run(self.svc.update_restaurant(
            self.restaurant.id, self.owner, {"is_active": False, "total_orders": 999},
        ))
        self.assertFalse(r.is_active)
        self.assertFalse(hasattr(r, "total_orders"))

    def test_update_by_non_owner(self):
        with self.assertRaises(UnauthorizedError):
            _run(self.svc.update_restaurant(
                self.restaurant.id, Actor(id=uuid4(), role=Role.RESTAURANT), {"name": "Mine now"},
            ))

    def test_get_missing_restaurant(self):
        self.svc._restaurants.get_by_id = AsyncMock(return_value=None)
        with self.assertRaises(NotFoundError):
            _run(self.svc.get_restaurant(uuid4()))


class TestMenuItems(unittest.TestCase):
    def setUp(self):
        self.svc = _make_service()
        self.owner = Actor(id=uuid4(), role=Role.RESTAURANT)
        self.restaurant = SimpleNamespace(id=uuid4(), owner_id=self.owner.id)
        self.svc._restaurants.get_by_id = AsyncMock(return_value=self.restaurant)

    def test_create_normalizes_prices(self):
        item = _run(self.svc.create_menu_item(self.owner, self.restaurant.id, {
            "name": "Margherita",
            "category": "pizza",
            "price": "12.989",
            "customization_options": [{"name": " Extra cheese ", "price": Decimal("1.5")}],
        }))
        self.assertEqual(item.price, Decimal("12.99"))
        self.assertEqual(item.customization_options, [{"name": "Extra cheese", "price": "1.50"}])
        self.assertEqual(item.restaurant_id, self.restaurant.id)

    def test_duplicate_options_rejected(self):
        with self.assertRaises(ValidationError):
            _run(self.svc.create_menu_item(self.owner, self.restaurant.id, {
                "name": "Margherita",
                "category": "pizza",
                "price": "10",
                "customization_options": [{"name": "Basil"}, {"name": "Basil"}],
            }))

    def test_negative_price_rejected(self):
        with self.assertRaises(ValidationError):
            _run(self.svc.create_menu_item(self.owner, self.restaurant.id, {
                "name": "Free money", "category": "misc", "price": "-1",
            }))

    def test_update_checks_owner_of_items_restaurant(self):
        item = SimpleNamespace(id=uuid4(), restaurant_id=self.restaurant.id, is_available=True)
        self.svc._items.get_by_id = AsyncMock(return_value=item)
        with self.assertRaises(UnauthorizedError):
            _run(self.svc.update_menu_item(item.id, Actor(id=uuid4(), role=Role.RESTAURANT), {}))
        updated = _run(self.svc.update_menu_item(item.id, self.owner, {"is_available": False}))
        self.assertFalse(updated.is_available)

    def test_update_missing_item(self):
        self.svc._items.get_by_id = AsyncMock(return_value=None)
        with self.assertRaises(NotFoundError):
            _run(self.svc.update_menu_item(uuid4(), self.owner, {"price": "1"}))

    def test_list_menu_for_missing_restaurant(self):
        self.svc._restaurants.get_by_id = AsyncMock(return_value=None)
        with self.assertRaises(NotFoundError):
            _run(self.svc.list_menu_items(uuid4()))

class TestCatalogDeletes(unittest.TestCase):
    def setUp(self):
        self.svc = _make_service()
        self.owner = Actor(id=uuid4(), role=Role.RESTAURANT)
        self.restaurant = SimpleNamespace(id=uuid4(), owner_id=self.owner.id, name="Luigi's")
        self.item = SimpleNamespace(id=uuid4(), restaurant_id=self.restaurant.id, name="Margherita")
        self.svc._restaurants.get_by_id = AsyncMock(return_value=self.restaurant)
        self.svc._items.get_by_id = AsyncMock(return_value=self.item)
        self.svc._restaurants.delete = AsyncMock(return_value=True)
        self.svc._items.delete = AsyncMock(return_value=True)
        self.svc._orders.count_filtered = AsyncMock(return_value=0)

    def test_owner_deletes_restaurant_without_orders(self):
        _run(self.svc.delete_restaurant(self.restaurant.id, self.owner))
        self.svc._orders.count_filtered.assert_awaited_once_with(restaurant_ids=[self.restaurant.id])
        self.svc._restaurants.delete.assert_awaited_once_with(self.restaurant.id)

    def test_restaurant_with_orders_is_kept(self):
        self.svc._orders.count_filtered = AsyncMock(return_value=3)
        with self.assertRaises(ResourceInUseError) as ctx:
            _run(self.svc.delete_restaurant(self.restaurant.id, Actor(id=uuid4(), role=Role.ADMIN)))
        self.assertFalse(ctx.exception.retryable)
        self.svc._restaurants.delete.assert_not_awaited()

    def test_non_owner_cannot_delete_restaurant(self):
        with self.assertRaises(UnauthorizedError):
            _run(self.svc.delete_restaurant(
                self.restaurant.id, Actor(id=uuid4(), role=Role.RESTAURANT),
            ))
        self.svc._restaurants.delete.assert_not_awaited()

    def test_delete_menu_item(self):
        with self.assertRaises(UnauthorizedError):
            _run(self.svc.delete_menu_item(self.item.id, Actor(id=uuid4(), role=Role.CUSTOMER)))
        _run(self.svc.delete_menu_item(self.item.id, self.owner))
        self.svc._items.delete.assert_awaited_once_with(self.item.id)

    def test_delete_missing_menu_item(self):
        self.svc._items.get_by_id = AsyncMock(return_value=None)
        with self.assertRaises(NotFoundError):
            _run(self.svc.delete_menu_item(uuid4(), self.owner))


class TestBrowsing(unittest.TestCase):
    def setUp(self):
        self.svc = _make_service()
        self.svc._restaurants.list_all = AsyncMock(return_value=[])
        self.svc._items.search = AsyncMock(return_value=[])

    def test_list_restaurants_normalizes_filters(self):
        _run(self.svc.list_restaurants(
            cuisines=["italian", " ", " thai"], search="  pizza ", sort="name",
        ))
        self.svc._restaurants.list_all.assert_awaited_once_with(
            cuisines=["italian", "thai"], search="pizza", min_rating=None,
            active_only=True, sort="name", skip=0, limit=25,
        )

    def test_unknown_sort(self):
        with self.assertRaises(ValidationError) as ctx:
            _run(self.svc.list_restaurants(sort="-price"))
        self.assertIn("rating", ctx.exception.details["allowed"])
        self.svc._restaurants.list_all.assert_not_awaited()

    def test_search_menu_items(self):
        _run(self.svc.search_menu_items(text=" cheese ", price_min="5", price_max=Decimal("15")))
        self.svc._items.search.assert_awaited_once_with(
            text="cheese", category=None, price_min=Decimal("5"), price_max=Decimal("15"),
            restaurant_id=None, limit=50,
        )

    def test_search_price_range_inverted(self):
        with self.assertRaises(ValidationError):
            _run(self.svc.search_menu_items(price_min="20", price_max="10"))
        self.svc._items.search.assert_not_awaited()

    def test_require_menu_item(self):
        self.svc._items.get_by_id = AsyncMock(return_value=None)
        with self.assertRaises(NotFoundError):
            _run(self.svc.require_menu_item(uuid4()))


class TestCatalogReadFailures(unittest.TestCase):
    def setUp(self):
        self.svc = _make_service()
        self.timeout = OperationalError(
            "SELECT", {}, Exception("canceling statement due to statement timeout"),
        )

    def test_lookups_become_transient(self):
        self.svc._items.get_by_id = AsyncMock(side_effect=self.timeout)
        self.svc._restaurants.get_by_id = AsyncMock(side_effect=self.timeout)
        with self.assertRaises(TransientError):
            _run(self.svc.get_menu_item(uuid4()))
        with self.assertRaises(TransientError):
            _run(self.svc.get_restaurant(uuid4()))

    def test_browsing_becomes_transient(self):
        self.svc._restaurants.list_all = AsyncMock(side_effect=self.timeout)
        with self.assertRaises(TransientError):
            _run(self.svc.list_restaurants())



if __name__ == "__main__":
    unittest.main()
