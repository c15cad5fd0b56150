"""Abstract repositories for customers and the loyalty policy."""

from __future__ import annotations

from abc import ABC, abstractmethod

from greengrocer.domain.model.loyalty import Customer, LoyaltySettings


class CustomerRepository(ABC):

    @abstractmethod
    def get_by_id(self, customer_id: str) -> Customer | None:
        """Return a customer by ID, or None."""

    @abstractmethod
    def save(self, customer: Customer) -> None:
        """Persist a new or updated customer."""

    @abstractmethod
    def increment_completed_orders(self, customer_id: str) -> None:
        """Add one delivered order to the customer's counter."""

    @abstractmethod
    def reset_completed_orders(self, customer_id: str) -> None:
        """Drop the customer's counter back to zero."""


class LoyaltySettingsRepository(ABC):

    @abstractmethod
    def get(self) -> LoyaltySettings:
        """Return the current policy, or the defaults if none was saved."""

    @abstractmethod
    def save(self, settings: LoyaltySettings) -> None:
        """Replace the policy."""
