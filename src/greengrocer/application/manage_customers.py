"""Application services: customers and the loyalty policy."""

from __future__ import annotations

from greengrocer.application.dto import CustomerDTO
from greengrocer.application.manage_coupons import parse_percent
from greengrocer.domain.exceptions import EntityNotFoundError, ValidationError
from greengrocer.domain.model.loyalty import Customer, LoyaltySettings
from greengrocer.domain.repository.customer_repository import (
    CustomerRepository,
    LoyaltySettingsRepository,
)


class AddCustomerHandler:

    def __init__(self, customer_repo: CustomerRepository) -> None:
        self._customer_repo = customer_repo

    def handle(self, customer_id: str, name: str) -> None:
        if not customer_id or not name or not name.strip():
            raise ValidationError("Customer ID and name are required")
        if self._customer_repo.get_by_id(customer_id) is not None:
            raise ValidationError(f"Customer '{customer_id}' already exists")
        self._customer_repo.save(Customer(id=customer_id, name=name.strip()))


class ShowCustomerHandler:

    def __init__(
        self,
        customer_repo: CustomerRepository,
        loyalty_repo: LoyaltySettingsRepository,
    ) -> None:
        self._customer_repo = customer_repo
        self._loyalty_repo = loyalty_repo

    def handle(self, customer_id: str) -> CustomerDTO:
        customer = self._customer_repo.get_by_id(customer_id)
        if customer is None:
            raise EntityNotFoundError(f"Customer '{customer_id}' not found")
        settings = self._loyalty_repo.get()
        return CustomerDTO(
            id=customer.id,
            name=customer.name,
            completed_orders=customer.completed_orders,
            loyalty_eligible=settings.is_eligible(customer.completed_orders),
            orders_until_eligible=customer.orders_until_eligible(settings),
        )


class ShowLoyaltySettingsHandler:

    def __init__(self, loyalty_repo: LoyaltySettingsRepository) -> None:
        self._loyalty_repo = loyalty_repo

    def handle(self) -> LoyaltySettings:
        return self._loyalty_repo.get()


class UpdateLoyaltySettingsHandler:

    def __init__(self, loyalty_repo: LoyaltySettingsRepository) -> None:
        self._loyalty_repo = loyalty_repo

    def handle(self, min_orders: int, discount_percent: str) -> LoyaltySettings:
        settings = LoyaltySettings(
            min_orders_for_discount=min_orders,
            discount_percent=parse_percent(discount_percent),
        )
        self._loyalty_repo.save(settings)
        return settings
