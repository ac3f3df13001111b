"""Tests for the Orders and Restaurants routers: actor headers, error rendering, wiring."""
from __future__ import annotations

import unittest
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from fastapi import FastAPI
from fastapi.testclient import TestClient

from food_express.api.dependencies import get_catalog_service, get_order_service
from food_express.api.main import project_error_handler
from food_express.api.routers import orders, restaurants
from food_express.config import AppConfig
from food_express.config.app import DEFAULT_ORDER_RATE_LIMIT
from food_express.core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ProjectError,
    ResourceInUseError,
    UnauthorizedError,
)
from food_express.ordering.types import Role

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


# ─── helpers ─────────────────────────────────────────────────────────────────

def _fake_order(**kwargs):
    defaults = {
        "id": uuid4(),
        "order_number": "FE20261018000001",
        "customer_id": uuid4(),
        "restaurant_id": uuid4(),
        "driver_id": None,
        "line_items": [],
        "subtotal": Decimal("21.98"),
        "tax": Decimal("1.76"),
        "delivery_fee": Decimal("3.99"),
        "service_fee": Decimal("0.00"),
        "discount": Decimal("0.00"),
        "tip": Decimal("0.00"),
        "total": Decimal("27.73"),
        "delivery_address": {"street": "1 Main St", "city": "Springfield", "state": "IL", "zipCode": "62701"},
        "status": "pending",
        "payment_method": "card",
        "payment_status": "pending",
        "special_instructions": None,
        "estimated_delivery_time": NOW,
        "actual_delivery_time": None,
        "tracking_history": [],
        "rating": None,
        "cancellation": None,
        "refund": None,
        "version": 1,
        "created_at": NOW,
        "updated_at": NOW,
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def _fake_menu_item(**kwargs):
    defaults = {
        "id": uuid4(), "restaurant_id": uuid4(), "name": "Margherita", "description": "",
        "category": "pizza", "price": Decimal("12.99"), "is_available": True, "is_popular": True,
        "preparation_time": 15, "customization_options": [], "allergens": [],
        "created_at": NOW, "updated_at": NOW,
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def _headers(role: Role = Role.CUSTOMER, actor_id=None):
    return {"X-Actor-Id": str(actor_id or uuid4()), "X-Actor-Role": role.value}


def _make_test_app(order_svc=None, catalog_svc=None):
    """Minimal app with both routers and the service dependencies overridden."""
    app = FastAPI()
    app.add_exception_handler(ProjectError, project_error_handler)
    app.state.limiter = orders.limiter
    app.include_router(orders.router, prefix="/api/v1")
    app.include_router(restaurants.router, prefix="/api/v1")
    app.dependency_overrides[get_order_service] = lambda: order_svc or MagicMock()
    app.dependency_overrides[get_catalog_service] = lambda: catalog_svc or MagicMock()
    return app


def _create_body(**kwargs):
    body = {
        "restaurant_id": str(uuid4()),
        "items": [{"menu_item_id": str(uuid4()), "quantity": 2, "customizations": ["Extra cheese"]}],
        "delivery_address": {"street": "1 Main St", "city": "Springfield", "state": "IL", "zip_code": "62701"},
        "payment_method": "card",
    }
    body.update(kwargs)
    return body


# ─── actor resolution ────────────────────────────────────────────────────────

class TestActorHeaders(unittest.TestCase):
    def setUp(self):
        self.svc = MagicMock()
        self.svc.get_order = AsyncMock(return_value=_fake_order())
        self.client = TestClient(_make_test_app(self.svc))

    def test_missing_headers_is_401(self):
        resp = self.client.get(f"/api/v1/orders/{uuid4()}")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "UNAUTHENTICATED")
        self.svc.get_order.assert_not_awaited()

    def test_bad_actor_id_is_401(self):
        resp = self.client.get(
            f"/api/v1/orders/{uuid4()}",
            headers={"X-Actor-Id": "nope", "X-Actor-Role": "customer"},
        )
        self.assertEqual(resp.status_code, 401)

    def test_unknown_role_is_401(self):
        resp = self.client.get(
            f"/api/v1/orders/{uuid4()}",
            headers={"X-Actor-Id": str(uuid4()), "X-Actor-Role": "chef"},
        )
        self.assertEqual(resp.status_code, 401)

    def test_actor_passed_to_service(self):
        actor_id = uuid4()
        order_id = uuid4()
        resp = self.client.get(f"/api/v1/orders/{order_id}", headers=_headers(Role.DELIVERY, actor_id))
        self.assertEqual(resp.status_code, 200)
        called_id, actor = self.svc.get_order.await_args.args
        self.assertEqual(called_id, order_id)
        self.assertEqual(actor.id, actor_id)
        self.assertIs(actor.role, Role.DELIVERY)


# ─── orders ──────────────────────────────────────────────────────────────────

class TestOrdersRouter(unittest.TestCase):
    def setUp(self):
        self.svc = MagicMock()
        self.client = TestClient(_make_test_app(self.svc))

    def test_create_order(self):
        self.svc.create_order = AsyncMock(return_value=_fake_order())
        resp = self.client.post("/api/v1/orders", json=_create_body(tip="1.50"), headers=_headers())
        self.assertEqual(resp.status_code, 201)
        data = resp.json()
        self.assertEqual(data["order_number"], "FE20261018000001")
        self.assertEqual(Decimal(data["total"]), Decimal("27.73"))

        args = self.svc.create_order.await_args
        lines = args.args[2]
        self.assertEqual(lines[0].quantity, 2)
        self.assertEqual(lines[0].customizations, ["Extra cheese"])
        self.assertEqual(args.args[3].zip_code, "62701")
        self.assertEqual(args.kwargs["tip"], Decimal("1.50"))

    def test_list_orders_paginates(self):
        self.svc.list_orders = AsyncMock(return_value=([_fake_order(), _fake_order()], 7))
        resp = self.client.get("/api/v1/orders?skip=2&limit=2&status=pending", headers=_headers(Role.ADMIN))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["total"], 7)
        self.assertEqual(len(data["items"]), 2)
        self.assertEqual(self.svc.list_orders.await_args.kwargs["status"], "pending")

    def test_mine_is_not_treated_as_an_id(self):
        self.svc.list_my_orders = AsyncMock(return_value=([], 0))
        resp = self.client.get("/api/v1/orders/mine", headers=_headers())
        self.assertEqual(resp.status_code, 200)
        self.svc.list_my_orders.assert_awaited_once()

    def test_stats(self):
        self.svc.order_stats = AsyncMock(return_value={
            "total_orders": 3,
            "total_revenue": Decimal("60.00"),
            "average_order_value": Decimal("20.00"),
            "by_status": {"pending": 3},
        })
        resp = self.client.get("/api/v1/orders/stats", headers=_headers(Role.RESTAURANT))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["total_orders"], 3)

    def test_status_update(self):
        self.svc.advance_status = AsyncMock(return_value=_fake_order(status="confirmed"))
        order_id = uuid4()
        resp = self.client.patch(
            f"/api/v1/orders/{order_id}/status",
            json={"status": "confirmed", "note": "accepted"},
            headers=_headers(Role.RESTAURANT),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "confirmed")
        self.assertEqual(self.svc.advance_status.await_args.kwargs["note"], "accepted")

    def test_rating(self):
        self.svc.rate_order = AsyncMock(return_value=_fake_order(status="delivered"))
        resp = self.client.post(
            f"/api/v1/orders/{uuid4()}/rating",
            json={"food": 5, "delivery": 4, "overall": 5, "comment": "great"},
            headers=_headers(),
        )
        self.assertEqual(resp.status_code, 200)
        scores = self.svc.rate_order.await_args.args[1]
        self.assertEqual((scores.food, scores.delivery, scores.overall), (5, 4, 5))

    def test_delete(self):
        self.svc.delete_order = AsyncMock(return_value=None)
        resp = self.client.delete(f"/api/v1/orders/{uuid4()}", headers=_headers(Role.ADMIN))
        self.assertEqual(resp.status_code, 204)


# ─── error rendering ─────────────────────────────────────────────────────────

class TestErrorRendering(unittest.TestCase):
    def _call_with(self, exc):
        svc = MagicMock()
        svc.cancel_order = AsyncMock(side_effect=exc)
        client = TestClient(_make_test_app(svc))
        return client.post(f"/api/v1/orders/{uuid4()}/cancel", json={"reason": "x"}, headers=_headers())

    def test_status_codes(self):
        cases = [
            (NotFoundError("Order not found"), 404),
            (UnauthorizedError("no"), 403),
            (InvalidTransitionError("Order is already delivered"), 409),
            (ConflictError("raced"), 409),
        ]
        for exc, code in cases:
            with self.subTest(exc=type(exc).__name__):
                self.assertEqual(self._call_with(exc).status_code, code)

    def test_conflict_is_marked_retryable(self):
        body = self._call_with(ConflictError("raced", cause=RuntimeError("boom"))).json()
        self.assertTrue(body["retryable"])
        self.assertNotIn("boom", str(body))


# ─── restaurants ─────────────────────────────────────────────────────────────

class TestRestaurantsRouter(unittest.TestCase):
    def test_list_restaurants_is_public(self):
        catalog = MagicMock()
        catalog.list_restaurants = AsyncMock(return_value=[SimpleNamespace(
            id=uuid4(), owner_id=uuid4(), name="Luigi's", description="", cuisine=["italian"],
            address={}, contact={}, delivery_minutes=None, is_active=True, total_orders=0,
            total_revenue=Decimal("0"), rating_count=0, rating_average=0.0,
            created_at=NOW, updated_at=NOW,
        )])
        client = TestClient(_make_test_app(catalog_svc=catalog))
        resp = client.get("/api/v1/restaurants?cuisine=italian")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()[0]["name"], "Luigi's")
        self.assertEqual(catalog.list_restaurants.await_args.kwargs["cuisines"], ["italian"])

    def test_patch_menu_item_passes_only_set_fields(self):
        catalog = MagicMock()
        item_id = uuid4()
        catalog.update_menu_item = AsyncMock(return_value=SimpleNamespace(
            id=item_id, restaurant_id=uuid4(), name="Margherita", description="", category="pizza",
            price=Decimal("12.99"), is_available=False, is_popular=False, preparation_time=15,
            customization_options=[], allergens=[], created_at=NOW, updated_at=NOW,
        ))
        client = TestClient(_make_test_app(catalog_svc=catalog))
        resp = client.patch(
            f"/api/v1/menu-items/{item_id}",
            json={"is_available": False},
            headers=_headers(Role.RESTAURANT),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(catalog.update_menu_item.await_args.args[2], {"is_available": False})

    def test_menu_search_is_not_treated_as_an_id(self):
        catalog = MagicMock()
        catalog.search_menu_items = AsyncMock(return_value=[_fake_menu_item()])
        client = TestClient(_make_test_app(catalog_svc=catalog))
        resp = client.get("/api/v1/menu-items/search?q=pizza&price_max=15")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()[0]["name"], "Margherita")
        kwargs = catalog.search_menu_items.await_args.kwargs
        self.assertEqual(kwargs["text"], "pizza")
        self.assertEqual(kwargs["price_max"], Decimal("15"))

    def test_get_menu_item_is_public(self):
        catalog = MagicMock()
        item = _fake_menu_item()
        catalog.require_menu_item = AsyncMock(return_value=item)
        client = TestClient(_make_test_app(catalog_svc=catalog))
        resp = client.get(f"/api/v1/menu-items/{item.id}")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["id"], str(item.id))

    def test_deletes(self):
        catalog = MagicMock()
        catalog.delete_restaurant = AsyncMock(return_value=None)
        catalog.delete_menu_item = AsyncMock(return_value=None)
        client = TestClient(_make_test_app(catalog_svc=catalog))
        headers = _headers(Role.RESTAURANT)
        self.assertEqual(client.delete(f"/api/v1/restaurants/{uuid4()}", headers=headers).status_code, 204)
        self.assertEqual(client.delete(f"/api/v1/menu-items/{uuid4()}", headers=headers).status_code, 204)

    def test_restaurant_with_orders_is_409_not_retryable(self):
        catalog = MagicMock()
        catalog.delete_restaurant = AsyncMock(side_effect=ResourceInUseError("Restaurant has orders"))
        client = TestClient(_make_test_app(catalog_svc=catalog))
        resp = client.delete(f"/api/v1/restaurants/{uuid4()}", headers=_headers(Role.ADMIN))
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "RESOURCE_IN_USE")
        self.assertFalse(resp.json()["retryable"])


class TestOrderRateLimit(unittest.TestCase):
    def tearDown(self):
        orders.configure_rate_limits(AppConfig())

    def test_limit_comes_from_app_config(self):
        self.assertEqual(orders.order_rate_limit(), DEFAULT_ORDER_RATE_LIMIT)
        orders.configure_rate_limits(AppConfig(order_rate_limit="5/minute"))
        self.assertEqual(orders.order_rate_limit(), "5/minute")


if __name__ == "__main__":
    unittest.main()
