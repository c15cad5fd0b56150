"""Domain service: Stock Ledger.

Coordinates stock reservation for a multi-line order.  Each line is one
atomic conditional decrement on the catalog; the order as a whole is
all-or-nothing through compensation: when a later line fails, every line
already reserved for the order is released before the error surfaces.

Owner alerts are decided from the stock level *before* each reservation,
so only the order that pushes a product into the low band announces it.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from greengrocer.domain.exceptions import ResourceExhausted
from greengrocer.domain.model.order import OrderLineItem
from greengrocer.domain.model.product import StockReservation
from greengrocer.domain.model.value_objects import Quantity
from greengrocer.domain.notifier import Notifier, RecipientRole
from greengrocer.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


class StockLedger:

    def __init__(self, product_repo: ProductRepository, notifier: Notifier) -> None:
        self._product_repo = product_repo
        self._notifier = notifier

    def reserve(self, product_id: str, quantity: Quantity) -> StockReservation:
        """Take *quantity* out of stock or raise ResourceExhausted."""
        reservation = self._product_repo.reserve_stock(product_id, quantity)
        if reservation is None:
            product = self._product_repo.get_by_id(product_id)
            name = product.name if product is not None else product_id
            available = f"{product.stock_kg} kg" if product is not None else "none"
            raise ResourceExhausted(
                f"Insufficient stock for {name} (need {quantity}, have {available})",
                product_id=product_id,
            )
        logger.info(
            "Stock reserved",
            product_id=product_id,
            quantity_kg=str(quantity.kg),
            stock_after_kg=str(reservation.stock_after_kg),
        )
        return reservation

    def release(self, product_id: str, quantity: Quantity) -> None:
        self._product_repo.release_stock(product_id, quantity)
        logger.info("Stock released", product_id=product_id, quantity_kg=str(quantity.kg))

    def reserve_all(self, lines: Iterable[OrderLineItem]) -> list[StockReservation]:
        """Reserve every line, or none of them."""
        reserved: list[StockReservation] = []
        try:
            for line in lines:
                reserved.append(self.reserve(line.product_id, line.quantity))
        except Exception:
            self.release_all(reserved)
            raise
        return reserved

    def release_all(self, reservations: Iterable[StockReservation]) -> None:
        """Give back every reservation; called while another error propagates.

        A failed release is logged and skipped so the remaining lines are
        still returned and the caller's original error is what surfaces.
        """
        for reservation in reversed(list(reservations)):
            try:
                self.release(reservation.product_id, reservation.quantity)
            except Exception as exc:
                logger.error(
                    "Stock release failed",
                    product_id=reservation.product_id,
                    quantity_kg=str(reservation.quantity.kg),
                    error=str(exc),
                )

    def announce(self, reservations: Iterable[StockReservation]) -> None:
        """Alert the owner about products that ran out or turned low-stock."""
        for reservation in reservations:
            if reservation.stocked_out:
                self._send(
                    f"Stock Alert: {reservation.product_name} is OUT OF STOCK",
                    f"Product: {reservation.product_name}\n"
                    f"Current Stock: {reservation.stock_after_kg:.3f} kg\n"
                    f"Status: OUT OF STOCK\n\n"
                    f"Please restock this product as soon as possible.",
                )
            elif reservation.crossed_threshold:
                self._send(
                    f"Price Alert: {reservation.product_name} - PRICE DOUBLED",
                    f"Product: {reservation.product_name}\n"
                    f"Current Stock: {reservation.stock_after_kg:.3f} kg\n"
                    f"Threshold: {reservation.threshold_kg:.3f} kg\n"
                    f"Status: LOW STOCK - PRICE DOUBLED",
                )

    def _send(self, subject: str, body: str) -> None:
        try:
            self._notifier.notify(RecipientRole.OWNER, subject, body)
        except Exception as exc:
            logger.error("Stock alert failed", subject=subject, error=str(exc))
