"""
food_express.infra.database – PostgreSQL async engine, session, models and repositories.

Public API
──────────
  build_engine, build_session_factory, init_db, close_engine, ensure_database_exists
  translate_db_errors
  Base, Restaurant, MenuItem, Order (models)
  BaseRepository, RestaurantRepository, MenuItemRepository, OrderRepository
"""
from food_express.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from food_express.infra.database.errors import translate_db_errors
from food_express.infra.database.models import Base, MenuItem, Order, Restaurant
from food_express.infra.database.repositories import (
    BaseRepository,
    MenuItemRepository,
    OrderRepository,
    RestaurantRepository,
)

__all__ = [
    "build_engine",
    "build_session_factory",
    "init_db",
    "close_engine",
    "ensure_database_exists",
    "translate_db_errors",
    "Base",
    "Restaurant",
    "MenuItem",
    "Order",
    "BaseRepository",
    "RestaurantRepository",
    "MenuItemRepository",
    "OrderRepository",
]
