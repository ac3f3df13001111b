"""
Project exception system.

Usage:
    from food_express.core.exceptions import ProjectError, ValidationError

    raise ValidationError("Quantity must be at least 1", details={"line": 0})
"""
from food_express.core.exceptions.base import ProjectError
from food_express.core.exceptions.errors import (
    AlreadyRatedError,
    AlreadyRefundedError,
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    InvalidRatingError,
    InvalidTransitionError,
    ItemNotFoundError,
    ItemUnavailableError,
    NotCancellableError,
    NotDeliverableError,
    NotFoundError,
    OrderStateError,
    ResourceInUseError,
    TransientError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    "ProjectError",
    "ConfigurationError",
    "ValidationError",
    "InvalidRatingError",
    "NotFoundError",
    "ItemNotFoundError",
    "ItemUnavailableError",
    "AuthenticationError",
    "UnauthorizedError",
    "OrderStateError",
    "InvalidTransitionError",
    "NotCancellableError",
    "NotDeliverableError",
    "AlreadyRatedError",
    "AlreadyRefundedError",
    "ResourceInUseError",
    "ConflictError",
    "TransientError",
]
