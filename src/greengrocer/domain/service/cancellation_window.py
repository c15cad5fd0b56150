"""Cancellation window: how long a customer may cancel a placed order."""

from __future__ import annotations

from datetime import datetime, timedelta

from greengrocer.config import CANCELLATION_WINDOW_HOURS

WINDOW = timedelta(hours=CANCELLATION_WINDOW_HOURS)


def hours_elapsed(order_time: datetime, now: datetime) -> int:
    """Whole hours since the order was placed (never negative)."""
    elapsed = now - order_time
    if elapsed <= timedelta(0):
        return 0
    return int(elapsed // timedelta(hours=1))


def remaining_hours(order_time: datetime, now: datetime) -> int:
    return max(0, CANCELLATION_WINDOW_HOURS - hours_elapsed(order_time, now))


def can_cancel(order_time: datetime, now: datetime) -> bool:
    return now - order_time < WINDOW


def cancellation_cutoff(now: datetime) -> datetime:
    """Orders placed after this instant are still cancellable at *now*."""
    return now - WINDOW
