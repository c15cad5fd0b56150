"""Abstract repository for the Coupon aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from greengrocer.domain.model.coupon import Coupon


class CouponRepository(ABC):

    @abstractmethod
    def get_by_id(self, coupon_id: int) -> Coupon | None:
        """Return a coupon by its ID, or None."""

    @abstractmethod
    def get_by_code(self, code: str) -> Coupon | None:
        """Return a coupon by its code (case-insensitive), or None."""

    @abstractmethod
    def list_all(self) -> list[Coupon]:
        """Return every coupon."""

    @abstractmethod
    def save(self, coupon: Coupon) -> None:
        """Persist a new or updated coupon and assign its ID."""

    @abstractmethod
    def has_used(self, customer_id: str, coupon_id: int) -> bool:
        """True if the customer already spent this coupon."""

    @abstractmethod
    def record_usage(self, customer_id: str, coupon_id: int) -> bool:
        """Mark the coupon used by the customer.

        Idempotent per customer and coupon: ``usage_count`` grows only the
        first time.  Returns True when this call recorded the usage.
        """

    @abstractmethod
    def release_usage(self, customer_id: str, coupon_id: int) -> None:
        """Undo ``record_usage`` for a checkout that did not go through."""
