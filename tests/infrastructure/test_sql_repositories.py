"""Tests for the SQLAlchemy repositories against a SQLite file."""

import threading
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import text

from greengrocer.application.update_product import UpdateProductHandler
from greengrocer.domain.exceptions import (
    BusinessRuleViolation,
    ConflictError,
    EntityNotFoundError,
    ErrorReason,
    Unavailable,
)
from greengrocer.domain.model.coupon import Coupon
from greengrocer.domain.model.loyalty import Customer, LoyaltySettings
from greengrocer.domain.model.order import Order, OrderLineItem, OrderStatus
from greengrocer.domain.model.product import Category, Product
from greengrocer.domain.model.value_objects import Money, Quantity
from greengrocer.domain.notifier import RecipientRole
from greengrocer.domain.service import pricing
from greengrocer.infrastructure.notification.inbox_notifier import InboxNotifier
from greengrocer.infrastructure.persistence.schema import create_store
from greengrocer.infrastructure.persistence.sql_coupon_repository import SqlCouponRepository
from greengrocer.infrastructure.persistence.sql_customer_repository import (
    SqlCustomerRepository,
    SqlLoyaltySettingsRepository,
)
from greengrocer.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from greengrocer.infrastructure.persistence.sql_product_repository import SqlProductRepository

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine(tmp_path):
    engine = create_store(f"sqlite:///{tmp_path / 'data' / 'shop.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def products(engine):
    repo = SqlProductRepository(engine)
    repo.save(Product("P1", "Tomato", Category.VEGETABLE, Money.of("2.50"),
                      Decimal("10"), Decimal("5")))
    return repo


def _order(customer_id: str = "cust-1", placed_at: datetime = NOW) -> Order:
    items = [
        OrderLineItem("P1", "Tomato", Quantity.of("2.5"), Money.of("2.50")),
        OrderLineItem("P2", "Apple", Quantity.of("1.125"), Money.of("4.00")),
    ]
    amounts = pricing.quote(pricing.subtotal(items), Decimal("10"))
    return Order.place(customer_id, items, amounts, placed_at + timedelta(hours=3), placed_at)


class TestProductRepository:

    def test_round_trip(self, products):
        tomato = products.get_by_id("P1")
        assert tomato.name == "Tomato"
        assert tomato.category is Category.VEGETABLE
        assert tomato.price == Money.of("2.50")
        assert tomato.stock_kg == Decimal("10")

    def test_get_by_name_case_insensitive(self, products):
        assert products.get_by_name("tOMATO").id == "P1"
        assert products.get_by_name("Mango") is None

    def test_save_updates_existing_but_not_stock(self, products):
        tomato = products.get_by_id("P1")
        tomato.update_price(Money.of("3.10"))
        tomato.restock(Decimal("7.25"))
        products.save(tomato)
        reloaded = products.get_by_id("P1")
        assert reloaded.price == Money.of("3.10")
        assert reloaded.stock_kg == Decimal("10")
        assert len(products.list_all()) == 1

    def test_update_price_and_set_stock(self, products):
        assert products.update_price("P1", Money.of("3.10"))
        assert products.set_stock("P1", Decimal("7.25"))
        reloaded = products.get_by_id("P1")
        assert reloaded.price == Money.of("3.10")
        assert reloaded.stock_kg == Decimal("7.25")
        assert not products.update_price("P9", Money.of("1"))
        assert not products.set_stock("P9", Decimal("1"))

    def test_price_update_keeps_reservation_made_after_read(self, engine, products):
        class CheckoutDuringEdit(SqlProductRepository):
            def get_by_id(self, product_id):
                product = super().get_by_id(product_id)
                self.reserve_stock(product_id, Quantity.of("8"))
                return product

        UpdateProductHandler(CheckoutDuringEdit(engine)).update_price("P1", "3.00")

        tomato = products.get_by_id("P1")
        assert tomato.price == Money.of("3.00")
        assert tomato.stock_kg == Decimal("2")

    def test_next_id_is_unique(self, products):
        assert products.next_id() != products.next_id()

    def test_reserve_reports_both_sides(self, products):
        reservation = products.reserve_stock("P1", Quantity.of("6"))
        assert reservation.stock_before_kg == Decimal("10")
        assert reservation.stock_after_kg == Decimal("4")
        assert reservation.crossed_threshold
        assert products.get_by_id("P1").stock_kg == Decimal("4")

    def test_reserve_refused_when_short(self, products):
        assert products.reserve_stock("P1", Quantity.of("10.001")) is None
        assert products.reserve_stock("P9", Quantity.of("1")) is None
        assert products.get_by_id("P1").stock_kg == Decimal("10")

    def test_release(self, products):
        products.reserve_stock("P1", Quantity.of("3"))
        products.release_stock("P1", Quantity.of("3"))
        assert products.get_by_id("P1").stock_kg == Decimal("10")

    def test_concurrent_reservations_never_oversell(self, products):
        barrier = threading.Barrier(8)
        granted: list[bool] = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            ok = products.reserve_stock("P1", Quantity.of("2")) is not None
            with lock:
                granted.append(ok)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert granted.count(True) == 5
        assert products.get_by_id("P1").stock_kg == Decimal("0")


class TestOrderRepository:

    def test_add_assigns_id_and_round_trips(self, engine):
        repo = SqlOrderRepository(engine)
        order = _order()
        repo.add(order)
        assert order.id == 1

        loaded = repo.get_by_id(1)
        assert loaded.status is OrderStatus.PENDING
        assert loaded.order_time == NOW
        assert loaded.requested_delivery == NOW + timedelta(hours=3)
        assert [i.product_name for i in loaded.items] == ["Tomato", "Apple"]
        assert loaded.items[1].quantity == Quantity.of("1.125")
        assert loaded.amounts == order.amounts

    def test_missing(self, engine):
        assert SqlOrderRepository(engine).get_by_id(5) is None

    def test_listings(self, engine):
        repo = SqlOrderRepository(engine)
        for minutes, customer in [(0, "cust-1"), (5, "cust-2"), (10, "cust-1")]:
            repo.add(_order(customer, NOW + timedelta(minutes=minutes)))
        repo.claim(2, "carrier-1")

        assert [o.id for o in repo.list_by_status(OrderStatus.PENDING)] == [1, 3]
        assert [o.id for o in repo.list_for_customer("cust-1")] == [3, 1]
        assert [o.id for o in repo.list_for_carrier("carrier-1", OrderStatus.SELECTED)] == [2]

    def test_claim(self, engine):
        repo = SqlOrderRepository(engine)
        repo.add(_order())
        claimed = repo.claim(1, "carrier-1")
        assert claimed.status is OrderStatus.SELECTED
        assert claimed.carrier_id == "carrier-1"

    def test_claim_taken_order(self, engine):
        repo = SqlOrderRepository(engine)
        repo.add(_order())
        repo.claim(1, "carrier-1")
        with pytest.raises(ConflictError) as exc_info:
            repo.claim(1, "carrier-2")
        assert exc_info.value.reason is ErrorReason.ALREADY_CLAIMED
        assert repo.get_by_id(1).carrier_id == "carrier-1"

    def test_claim_missing_order(self, engine):
        with pytest.raises(EntityNotFoundError):
            SqlOrderRepository(engine).claim(9, "carrier-1")

    def test_concurrent_claims_have_one_winner(self, engine):
        repo = SqlOrderRepository(engine)
        repo.add(_order())
        barrier = threading.Barrier(4)
        winners: list[str] = []
        reasons: list[ErrorReason] = []
        lock = threading.Lock()

        def worker(carrier_id: str):
            barrier.wait()
            try:
                repo.claim(1, carrier_id)
                with lock:
                    winners.append(carrier_id)
            except ConflictError as exc:
                with lock:
                    reasons.append(exc.reason)

        threads = [threading.Thread(target=worker, args=(f"c{i}",)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(winners) == 1
        assert reasons == [ErrorReason.ALREADY_CLAIMED] * 3
        assert repo.get_by_id(1).carrier_id == winners[0]

    def test_cancel_inside_window(self, engine):
        repo = SqlOrderRepository(engine)
        repo.add(_order())
        cancelled = repo.cancel(1, NOW + timedelta(hours=23, minutes=59))
        assert cancelled.status is OrderStatus.CANCELLED

    def test_cancel_outside_window(self, engine):
        repo = SqlOrderRepository(engine)
        repo.add(_order())
        with pytest.raises(BusinessRuleViolation) as exc_info:
            repo.cancel(1, NOW + timedelta(hours=24, minutes=1))
        assert exc_info.value.reason is ErrorReason.CANCELLATION_WINDOW_EXPIRED
        assert repo.get_by_id(1).status is OrderStatus.PENDING

    def test_cancel_claimed(self, engine):
        repo = SqlOrderRepository(engine)
        repo.add(_order())
        repo.claim(1, "carrier-1")
        with pytest.raises(ConflictError) as exc_info:
            repo.cancel(1, NOW)
        assert exc_info.value.reason is ErrorReason.ALREADY_CLAIMED

    def test_complete(self, engine):
        repo = SqlOrderRepository(engine)
        repo.add(_order())
        repo.claim(1, "carrier-1")
        delivered = repo.complete(1, "carrier-1", NOW + timedelta(hours=2))
        assert delivered.status is OrderStatus.DELIVERED
        assert delivered.delivery_time == NOW + timedelta(hours=2)

    def test_complete_by_wrong_carrier(self, engine):
        repo = SqlOrderRepository(engine)
        repo.add(_order())
        repo.claim(1, "carrier-1")
        with pytest.raises(ConflictError) as exc_info:
            repo.complete(1, "carrier-2", NOW)
        assert exc_info.value.reason is ErrorReason.NOT_ASSIGNED_CARRIER
        assert repo.get_by_id(1).status is OrderStatus.SELECTED


class TestCouponRepository:

    def test_save_and_lookup(self, engine):
        repo = SqlCouponRepository(engine)
        coupon = Coupon.create("spring", Decimal("7.5"), Money.of("20"), date(2026, 12, 31), 3)
        repo.save(coupon)
        assert coupon.id is not None

        loaded = repo.get_by_code("Spring")
        assert loaded.code == "SPRING"
        assert loaded.discount_percent == Decimal("7.5")
        assert loaded.expiry_date == date(2026, 12, 31)
        assert loaded.max_usage == 3
        assert repo.get_by_id(coupon.id).code == "SPRING"

    def test_deactivate_persists(self, engine):
        repo = SqlCouponRepository(engine)
        coupon = Coupon.create("SPRING", Decimal("5"), Money.zero())
        repo.save(coupon)
        coupon.deactivate()
        repo.save(coupon)
        assert repo.get_by_code("SPRING").active is False

    def test_usage_recorded_once_per_customer(self, engine):
        repo = SqlCouponRepository(engine)
        coupon = Coupon.create("SPRING", Decimal("5"), Money.zero())
        repo.save(coupon)

        assert repo.record_usage("cust-1", coupon.id) is True
        assert repo.record_usage("cust-1", coupon.id) is False
        assert repo.record_usage("cust-2", coupon.id) is True
        assert repo.has_used("cust-1", coupon.id)
        assert not repo.has_used("cust-3", coupon.id)
        assert repo.get_by_id(coupon.id).usage_count == 2

    def test_release_usage(self, engine):
        repo = SqlCouponRepository(engine)
        coupon = Coupon.create("SPRING", Decimal("5"), Money.zero())
        repo.save(coupon)
        repo.record_usage("cust-1", coupon.id)

        repo.release_usage("cust-1", coupon.id)
        repo.release_usage("cust-1", coupon.id)

        assert not repo.has_used("cust-1", coupon.id)
        assert repo.get_by_id(coupon.id).usage_count == 0
        assert repo.record_usage("cust-1", coupon.id) is True


class TestCustomerRepositories:

    def test_counter(self, engine):
        repo = SqlCustomerRepository(engine)
        repo.save(Customer("cust-1", "Ada"))
        repo.increment_completed_orders("cust-1")
        repo.increment_completed_orders("cust-1")
        assert repo.get_by_id("cust-1").completed_orders == 2
        repo.reset_completed_orders("cust-1")
        assert repo.get_by_id("cust-1").completed_orders == 0

    def test_counter_for_unknown_customer(self, engine):
        with pytest.raises(EntityNotFoundError):
            SqlCustomerRepository(engine).increment_completed_orders("ghost")

    def test_loyalty_defaults_then_saved(self, engine):
        repo = SqlLoyaltySettingsRepository(engine)
        assert repo.get() == LoyaltySettings()
        repo.save(LoyaltySettings(3, Decimal("12.5")))
        repo.save(LoyaltySettings(4, Decimal("15")))
        assert repo.get() == LoyaltySettings(4, Decimal("15"))


class TestInboxNotifier:

    def test_messages_by_role_and_recipient(self, engine):
        inbox = InboxNotifier(engine)
        inbox.notify(RecipientRole.OWNER, "Stock Alert", "Tomato is out")
        inbox.notify(RecipientRole.CUSTOMER, "Order #1 Delivered", "...", recipient_id="cust-1")
        inbox.notify(RecipientRole.CUSTOMER, "Order #2 Delivered", "...", recipient_id="cust-2")

        assert [m.subject for m in inbox.list_messages(RecipientRole.OWNER)] == ["Stock Alert"]
        mine = inbox.list_messages(RecipientRole.CUSTOMER, "cust-1")
        assert [m.subject for m in mine] == ["Order #1 Delivered"]
        assert mine[0].created_at.tzinfo is timezone.utc

    def test_storage_failure_is_unavailable(self, engine):
        with engine.begin() as conn:
            conn.execute(text("DROP TABLE messages"))
        with pytest.raises(Unavailable) as exc_info:
            InboxNotifier(engine).list_messages(RecipientRole.OWNER)
        assert exc_info.value.retryable is True
