"""Business constants and runtime settings.

The business constants are fixed for the whole shop.  Runtime settings
(database location, log level) come from the environment so the CLI and
tests can point at different stores.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------
VAT_RATE = Decimal("0.18")
MINIMUM_CART_VALUE = Decimal("10.00")
MAX_DELIVERY_LEAD_HOURS = 48
CANCELLATION_WINDOW_HOURS = 24
LOW_STOCK_PRICE_MULTIPLIER = 2

DEFAULT_LOYALTY_MIN_ORDERS = 5
DEFAULT_LOYALTY_DISCOUNT_PERCENT = Decimal("10")

# ---------------------------------------------------------------------------
# Runtime settings
# ---------------------------------------------------------------------------
# When installed in editable mode the project root is the repo root.
_DATA_DIR = Path(__file__).resolve().parents[2] / "data"


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str = "INFO"

    @staticmethod
    def from_env() -> Settings:
        default_url = f"sqlite:///{_DATA_DIR / 'greengrocer.db'}"
        return Settings(
            database_url=os.environ.get("GREENGROCER_DATABASE_URL", default_url),
            log_level=os.environ.get("GREENGROCER_LOG_LEVEL", "INFO").upper(),
        )
