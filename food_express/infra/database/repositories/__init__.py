"""Repositories for the order service database."""
from food_express.infra.database.repositories.base import BaseRepository
from food_express.infra.database.repositories.menu_item import MenuItemRepository
from food_express.infra.database.repositories.order import OrderRepository
from food_express.infra.database.repositories.restaurant import RestaurantRepository

__all__ = [
    "BaseRepository",
    "MenuItemRepository",
    "OrderRepository",
    "RestaurantRepository",
]
