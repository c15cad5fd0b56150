"""SQLAlchemy Core schema shared by the SQL repositories.

Weights are stored as integer grams so the conditional stock decrement
is exact.  Money and percentages are stored as decimal text.  Times are
stored as naive UTC and re-tagged with ``timezone.utc`` on load.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Connection,
    Date,
    DateTime,
    Engine,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
)
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError

from greengrocer.domain.exceptions import Unavailable
from greengrocer.domain.model.value_objects import GRAMS_PER_KG

# Seconds a SQLite writer waits for a competing writer's lock.
SQLITE_BUSY_TIMEOUT = 15

metadata = MetaData()

products = Table(
    "products",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("name", String(120), nullable=False, unique=True),
    Column("category", String(16), nullable=False),
    Column("price", String(32), nullable=False),
    Column("stock_grams", Integer, nullable=False),
    Column("threshold_grams", Integer, nullable=False),
    CheckConstraint("stock_grams >= 0", name="ck_products_stock_non_negative"),
)

orders = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("customer_id", String(64), nullable=False, index=True),
    Column("carrier_id", String(64), nullable=True, index=True),
    Column("status", String(16), nullable=False, index=True),
    Column("order_time", DateTime, nullable=False),
    Column("requested_delivery", DateTime, nullable=False),
    Column("delivery_time", DateTime, nullable=True),
    Column("subtotal", String(32), nullable=False),
    Column("discount_percent", String(16), nullable=False),
    Column("discount", String(32), nullable=False),
    Column("vat", String(32), nullable=False),
    Column("total", String(32), nullable=False),
)

order_items = Table(
    "order_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer, ForeignKey("orders.id"), nullable=False, index=True),
    Column("position", Integer, nullable=False),
    Column("product_id", String(32), nullable=False),
    Column("product_name", String(120), nullable=False),
    Column("quantity_grams", Integer, nullable=False),
    Column("unit_price", String(32), nullable=False),
)

coupons = Table(
    "coupons",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("code", String(64), nullable=False, unique=True),
    Column("discount_percent", String(16), nullable=False),
    Column("min_order_value", String(32), nullable=False),
    Column("expiry_date", Date, nullable=True),
    Column("active", Boolean, nullable=False, default=True),
    Column("max_usage", Integer, nullable=False, default=0),
    Column("usage_count", Integer, nullable=False, default=0),
)

coupon_usages = Table(
    "coupon_usages",
    metadata,
    Column("customer_id", String(64), primary_key=True),
    Column("coupon_id", Integer, ForeignKey("coupons.id"), primary_key=True),
    Column("used_at", DateTime, nullable=False),
)

customers = Table(
    "customers",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(120), nullable=False),
    Column("completed_orders", Integer, nullable=False, default=0),
)

loyalty_settings = Table(
    "loyalty_settings",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("min_orders_for_discount", Integer, nullable=False),
    Column("discount_percent", String(16), nullable=False),
)

messages = Table(
    "messages",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("recipient_role", String(16), nullable=False),
    Column("recipient_id", String(64), nullable=True),
    Column("subject", String(255), nullable=False),
    Column("body", Text, nullable=False),
    Column("created_at", DateTime, nullable=False),
)


# --- Engine -------------------------------------------------------------------


def create_store(database_url: str) -> Engine:
    """Create an engine for *database_url* and make sure the tables exist."""
    url = make_url(database_url)
    connect_args: dict = {}
    if url.get_backend_name() == "sqlite":
        connect_args["timeout"] = SQLITE_BUSY_TIMEOUT
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(url, connect_args=connect_args)
    try:
        metadata.create_all(engine)
    except SQLAlchemyError as exc:
        raise Unavailable(f"Could not initialise store at {url!r}: {exc}") from exc
    return engine


@contextmanager
def transaction(engine: Engine) -> Iterator[Connection]:
    """One unit of work.  Storage failures surface as ``Unavailable``."""
    try:
        with engine.begin() as conn:
            yield conn
    except SQLAlchemyError as exc:
        raise Unavailable(f"Storage error: {exc}") from exc


# --- Column helpers -----------------------------------------------------------


def to_db_time(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_db_time(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)


def to_grams(kg: Decimal) -> int:
    return int(kg * GRAMS_PER_KG)


def from_grams(grams: int) -> Decimal:
    return Decimal(grams) / GRAMS_PER_KG
