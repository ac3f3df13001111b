"""
Order service exception types. Add new ones here.
"""
from __future__ import annotations

from food_express.core.exceptions.base import ProjectError


class ConfigurationError(ProjectError):
    """Invalid or missing configuration."""

    default_code = "CONFIGURATION_ERROR"
    default_http_status = 500


class ValidationError(ProjectError):
    """Request or input validation failed (quantities, address, payment method)."""

    default_code = "VALIDATION_ERROR"
    default_http_status = 400


class InvalidRatingError(ValidationError):
    """A rating score is not an integer in [1, 5]."""

    default_code = "INVALID_RATING"
    default_http_status = 400


class NotFoundError(ProjectError):
    """Requested resource (restaurant, menu item, order) not found."""

    default_code = "NOT_FOUND"
    default_http_status = 404


class ItemNotFoundError(NotFoundError):
    """A cart line references a menu item id that does not resolve."""

    default_code = "ITEM_NOT_FOUND"
    default_http_status = 404


class ItemUnavailableError(ProjectError):
    """A cart line references a menu item the catalog reports as unavailable."""

    default_code = "ITEM_UNAVAILABLE"
    default_http_status = 409


class AuthenticationError(ProjectError):
    """Actor identity is missing or malformed."""

    default_code = "UNAUTHENTICATED"
    default_http_status = 401


class UnauthorizedError(ProjectError):
    """Actor lacks the capability (or relationship) required for the operation."""

    default_code = "UNAUTHORIZED"
    default_http_status = 403


class OrderStateError(ProjectError):
    """Base for order state-machine guard violations. Never retried."""

    default_code = "ORDER_STATE_ERROR"
    default_http_status = 409


class InvalidTransitionError(OrderStateError):
    """Status change is not a forward move (or the order is terminal)."""

    default_code = "INVALID_TRANSITION"


class NotCancellableError(OrderStateError):
    """Order is delivered or already cancelled."""

    default_code = "NOT_CANCELLABLE"


class NotDeliverableError(OrderStateError):
    """Operation requires a delivered order."""

    default_code = "NOT_DELIVERED"


class AlreadyRatedError(OrderStateError):
    """Order already carries a rating."""

    default_code = "ALREADY_RATED"


class AlreadyRefundedError(OrderStateError):
    """Order already carries a refund record."""

    default_code = "ALREADY_REFUNDED"


class ResourceInUseError(ProjectError):
    """Resource is still referenced (e.g. a restaurant with orders) and cannot be deleted."""

    default_code = "RESOURCE_IN_USE"
    default_http_status = 409


class ConflictError(ProjectError):
    """Resource state conflict (concurrent update lost, duplicate key)."""

    default_code = "CONFLICT"
    default_http_status = 409
    retryable = True


class TransientError(ProjectError):
    """Persistence layer timed out or dropped the connection; safe for the caller to retry."""

    default_code = "TRANSIENT_ERROR"
    default_http_status = 503
    retryable = True
