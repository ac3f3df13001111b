"""Service layer: order lifecycle engine and catalog."""
from food_express.services.catalog_service import CatalogService
from food_express.services.order_service import OrderService

__all__ = [
    "CatalogService",
    "OrderService",
]
