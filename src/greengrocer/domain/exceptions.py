"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Each error carries a machine-readable ``reason`` so callers can tell apart,
for example, "order already taken" from "cancellation window expired".
"""

from __future__ import annotations

from enum import Enum


class ErrorReason(Enum):
    EMPTY_CART = "EMPTY_CART"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_DELIVERY_TIME = "INVALID_DELIVERY_TIME"
    BELOW_MINIMUM = "BELOW_MINIMUM"
    DELIVERY_WINDOW = "DELIVERY_WINDOW"
    COUPON_INVALID = "COUPON_INVALID"
    COUPON_BELOW_MINIMUM = "COUPON_BELOW_MINIMUM"
    COUPON_ALREADY_USED = "COUPON_ALREADY_USED"
    LOYALTY_NOT_ELIGIBLE = "LOYALTY_NOT_ELIGIBLE"
    CANCELLATION_WINDOW_EXPIRED = "CANCELLATION_WINDOW_EXPIRED"
    ALREADY_CLAIMED = "ALREADY_CLAIMED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    NOT_ASSIGNED_CARRIER = "NOT_ASSIGNED_CARRIER"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    NOT_FOUND = "NOT_FOUND"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"


class DomainException(Exception):
    """Base class for all domain errors."""

    retryable = False

    def __init__(self, message: str, reason: ErrorReason | None = None) -> None:
        super().__init__(message)
        self.reason = reason


class ValidationError(DomainException):
    """Bad input: non-positive quantity, empty cart, malformed time."""


class BusinessRuleViolation(DomainException):
    """Input was well-formed but a shop rule forbids the operation."""


class ConflictError(DomainException):
    """The entity is not in the state the operation requires."""


class ResourceExhausted(DomainException):
    """Not enough stock to satisfy the request."""

    def __init__(self, message: str, product_id: str | None = None) -> None:
        super().__init__(message, ErrorReason.INSUFFICIENT_STOCK)
        self.product_id = product_id


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorReason.NOT_FOUND)


class Unavailable(DomainException):
    """The backing store failed.  The only retryable category."""

    retryable = True

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorReason.STORAGE_UNAVAILABLE)
