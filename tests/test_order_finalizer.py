from decimal import Decimal

import pytest

from settlement.data.models.cart import CartModel
from settlement.data.models.cart_item import CartItemModel
from settlement.data.models.gift_card import GiftCardModel
from settlement.data.models.mail import MailModel
from settlement.data.models.order import OrderModel
from settlement.data.models.user import UserModel
from settlement.domain.errors import (
    ConcurrencyConflict,
    FailedPrecondition,
    InvalidArgument,
    NotFound,
    Unauthenticated,
)
from settlement.repos.cart_repo import CartRepo
from settlement.services.discount_ledger import DiscountLedger
from settlement.services.notification_service import NotificationService
from settlement.services.order_finalizer import OrderFinalizer, make_order_id
from tests.helpers import reload


def orders_for(db, user_id):
    db.expire_all()
    return db.query(OrderModel).filter(OrderModel.user_id == user_id).all()


def items_in(db, cart_id):
    db.expire_all()
    return db.query(CartItemModel).filter(CartItemModel.cart_id == cart_id).all()


@pytest.fixture
def profile(db):
    user = UserModel(
        id="u1",
        name="Anna",
        surname="Nowak",
        email="anna@example.com",
        address="Main St 1",
        city="Gdansk",
        postcode="80-001",
    )
    db.add(user)
    db.commit()
    return user


def test_scenario_d_finalize_with_discount(db, make_cart, make_gift_card, profile):
    make_cart("u1", [("kb", "60.00", 1), ("mouse", "20.00", 2)])
    make_gift_card("TEN", "10.00")
    DiscountLedger(db).apply("u1", "TEN")

    result = OrderFinalizer(db).finalize("u1", "anna@example.com")

    assert result["final_amount_paid"] == Decimal("90.00")
    order = reload(db, OrderModel, result["order_id"])
    assert order.status == "pending"
    assert order.total_price == Decimal("100.00")
    assert order.applied_discount_amount == Decimal("10.00")
    assert order.applied_discount_code == "TEN"
    assert order.final_amount_paid == Decimal("90.00")
    assert order.customer_email == "anna@example.com"
    assert sorted(order.items, key=lambda i: i["productId"]) == [
        {"productId": "kb", "productName": "Product kb", "unitPrice": "60.00", "quantity": 1, "imageUrl": "https://img/kb.png"},
        {"productId": "mouse", "productName": "Product mouse", "unitPrice": "20.00", "quantity": 2, "imageUrl": "https://img/mouse.png"},
    ]

    cart = reload(db, CartModel, "u1")
    assert items_in(db, "u1") == []
    assert cart.total_price == Decimal("0.00")
    assert cart.item_count == 0
    assert cart.final_amount_to_pay == Decimal("0.00")
    assert cart.applied_discount_code is None
    assert cart.applied_discount_amount is None
    # zuzyta karta nie wraca na saldo
    assert reload(db, GiftCardModel, "TEN").balance == Decimal("0.00")


def test_finalize_without_discount(db, make_cart, profile):
    make_cart("u1", [("kb", "60.00", 1)])

    result = OrderFinalizer(db).finalize("u1", "anna@example.com")

    order = reload(db, OrderModel, result["order_id"])
    assert order.final_amount_paid == Decimal("60.00")
    assert order.applied_discount_amount == Decimal("0.00")
    assert order.applied_discount_code is None


def test_order_snapshot_is_independent_of_later_cart_changes(db, make_cart, profile):
    make_cart("u1", [("kb", "60.00", 1)])
    result = OrderFinalizer(db).finalize("u1", "anna@example.com")

    db.add(CartItemModel(cart_id="u1", product_id="kb", product_name="Keyboard v2", unit_price=Decimal("99.00"), quantity=5))
    db.commit()

    order = reload(db, OrderModel, result["order_id"])
    assert order.items[0]["unitPrice"] == "60.00"
    assert order.items[0]["quantity"] == 1


def test_shipping_snapshot_from_profile(db, make_cart, profile):
    make_cart("u1", [("kb", "60.00", 1)])

    result = OrderFinalizer(db).finalize("u1", "anna@example.com")

    order = reload(db, OrderModel, result["order_id"])
    assert order.shipping_address == {
        "name": "Anna",
        "surname": "Nowak",
        "address": "Main St 1",
        "city": "Gdansk",
        "postcode": "80-001",
    }


def test_shipping_snapshot_defaults_without_profile(db, make_cart):
    make_cart("u9", [("kb", "60.00", 1)])

    result = OrderFinalizer(db).finalize("u9", "buyer@example.com")

    order = reload(db, OrderModel, result["order_id"])
    assert order.shipping_address == {"name": "", "surname": "", "address": "", "city": "", "postcode": ""}


def test_address_falls_back_to_profile_email(db, make_cart, profile):
    make_cart("u1", [("kb", "60.00", 1)])

    result = OrderFinalizer(db).finalize("u1", None)

    assert reload(db, OrderModel, result["order_id"]).customer_email == "anna@example.com"


def test_missing_address_rejected(db, make_cart):
    make_cart("u9", [("kb", "60.00", 1)])

    with pytest.raises(InvalidArgument, match="required"):
        OrderFinalizer(db).finalize("u9", "  ")

    assert len(items_in(db, "u9")) == 1


def test_invalid_address_rejected(db, make_cart):
    make_cart("u9", [("kb", "60.00", 1)])

    with pytest.raises(InvalidArgument, match="Invalid email"):
        OrderFinalizer(db).finalize("u9", "not-an-email")


def test_finalize_requires_caller(db):
    with pytest.raises(Unauthenticated):
        OrderFinalizer(db).finalize(None, "a@example.com")


def test_missing_cart_not_found(db):
    with pytest.raises(NotFound):
        OrderFinalizer(db).finalize("ghost", "a@example.com")


def test_empty_cart_rejected(db, make_cart):
    make_cart("u1", [])

    with pytest.raises(FailedPrecondition, match="empty"):
        OrderFinalizer(db).finalize("u1", "a@example.com")

    assert orders_for(db, "u1") == []


def test_retry_after_success_does_not_duplicate_order(db, make_cart, profile):
    make_cart("u1", [("kb", "60.00", 1)])
    finalizer = OrderFinalizer(db)
    finalizer.finalize("u1", "anna@example.com")

    with pytest.raises(FailedPrecondition, match="empty"):
        finalizer.finalize("u1", "anna@example.com")

    assert len(orders_for(db, "u1")) == 1


def test_failure_inside_transaction_leaves_cart_untouched(db, make_cart, make_gift_card, profile, monkeypatch):
    make_cart("u1", [("kb", "60.00", 1), ("mouse", "20.00", 2)])
    make_gift_card("TEN", "10.00")
    DiscountLedger(db).apply("u1", "TEN")
    before = reload(db, CartModel, "u1")
    snapshot = (before.total_price, before.final_amount_to_pay, before.applied_discount_amount, before.version)

    def boom(self, **kwargs):
        raise RuntimeError("mail outbox unavailable")

    monkeypatch.setattr(NotificationService, "enqueue_order_confirmation", boom)

    with pytest.raises(RuntimeError):
        OrderFinalizer(db).finalize("u1", "anna@example.com")

    assert orders_for(db, "u1") == []
    assert len(items_in(db, "u1")) == 2
    after = reload(db, CartModel, "u1")
    assert (after.total_price, after.final_amount_to_pay, after.applied_discount_amount, after.version) == snapshot
    assert after.applied_discount_code == "TEN"
    assert db.query(MailModel).count() == 0


def test_conflict_exhaustion_leaves_cart_untouched(db, make_cart, profile, monkeypatch):
    make_cart("u1", [("kb", "60.00", 1)])
    monkeypatch.setattr(CartRepo, "update_cart_version", lambda self, cart_id, old_version, new_data: 0)

    with pytest.raises(ConcurrencyConflict):
        OrderFinalizer(db).finalize("u1", "anna@example.com")

    assert orders_for(db, "u1") == []
    assert len(items_in(db, "u1")) == 1


def test_conflict_is_retried_once(db, make_cart, profile, monkeypatch):
    make_cart("u1", [("kb", "60.00", 1)])
    original = CartRepo.update_cart_version
    calls = {"n": 0}

    def flaky(self, cart_id, old_version, new_data):
        calls["n"] += 1
        if calls["n"] == 1:
            return 0
        return original(self, cart_id, old_version, new_data)

    monkeypatch.setattr(CartRepo, "update_cart_version", flaky)

    result = OrderFinalizer(db).finalize("u1", "anna@example.com")

    assert calls["n"] == 2
    assert len(orders_for(db, "u1")) == 1
    assert reload(db, OrderModel, result["order_id"]) is not None


def test_malformed_line_degrades_instead_of_blocking(db, make_cart, profile):
    make_cart("u1", [("kb", "60.00", 1)])
    db.add(CartItemModel(cart_id="u1", product_id="legacy", product_name=None, unit_price=None, quantity=2))
    db.commit()

    result = OrderFinalizer(db).finalize("u1", "anna@example.com")

    order = reload(db, OrderModel, result["order_id"])
    legacy = next(i for i in order.items if i["productId"] == "legacy")
    assert legacy["productName"] == "Unknown product"
    assert legacy["unitPrice"] == "0.00"
    assert legacy["imageUrl"] is None
    assert order.total_price == Decimal("60.00")


def test_stale_summary_is_settled_from_current_lines(db, make_cart, profile):
    make_cart("u1", [("kb", "60.00", 1)])
    # pozycja dopisana, trigger przeliczenia jeszcze nie dobiegl
    db.add(CartItemModel(cart_id="u1", product_id="mouse", product_name="Mouse", unit_price=Decimal("20.00"), quantity=1))
    db.commit()

    result = OrderFinalizer(db).finalize("u1", "anna@example.com")

    assert result["final_amount_paid"] == Decimal("80.00")
    assert reload(db, OrderModel, result["order_id"]).total_price == Decimal("80.00")


def test_confirmation_mail_enqueued_and_delivered(db, make_cart, make_gift_card, profile):
    make_cart("u1", [("kb", "60.00", 1)])
    make_gift_card("TEN", "10.00")
    DiscountLedger(db).apply("u1", "TEN")

    result = OrderFinalizer(db).finalize("u1", "anna@example.com")

    db.expire_all()
    mails = db.query(MailModel).filter(MailModel.order_id == result["order_id"]).all()
    assert len(mails) == 1
    mail = mails[0]
    assert mail.recipient == "anna@example.com"
    assert mail.subject == f"Order Confirmation #{result['order_id']}"
    assert "Anna" in mail.html
    assert "€50.00" in mail.html
    assert "You earned 60 points!" in mail.html
    # celery w trybie eager dostarczyl od razu
    assert mail.sent_at is not None
    assert "mail_id" not in result


def test_order_id_is_derived_from_user_and_instant():
    from datetime import datetime, timezone

    instant = datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    assert make_order_id("u1", instant) == f"u1_{int(instant.timestamp() * 1000)}"
