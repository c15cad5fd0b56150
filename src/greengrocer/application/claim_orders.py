"""Application service: Claim Orders use case (carrier selects deliveries).

Each order is claimed independently; an order another carrier took first
is reported back rather than failing the whole batch.
"""

from __future__ import annotations

from greengrocer.domain.exceptions import ValidationError
from greengrocer.domain.repository.order_repository import OrderRepository
from greengrocer.domain.service.order_lifecycle import ClaimReport, OrderLifecycle


class ClaimOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._lifecycle = OrderLifecycle(order_repo)

    def handle(self, carrier_id: str, order_ids: list[int]) -> ClaimReport:
        if not order_ids:
            raise ValidationError("Select at least one order to deliver")
        return self._lifecycle.claim_many(order_ids, carrier_id)
