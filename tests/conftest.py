import os

# konfiguracja musi byc ustawiona zanim zaimportujemy pakiet
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["ADMIN_USER_IDS"] = "admin-1"
os.environ["TX_MAX_ATTEMPTS"] = "3"

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from tests.helpers import FakeProductClient

import settlement.data.models  # noqa: F401
from settlement.data.database import Base, SessionLocal, engine
from settlement.data.models.cart import CartModel
from settlement.data.models.cart_item import CartItemModel
from settlement.data.models.gift_card import GiftCardModel
from settlement.services.total_recalculator import TotalRecalculator


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def product_client():
    return FakeProductClient()


@pytest.fixture
def make_cart(db):
    """
    Koszyk z pozycjami zapisanymi bezposrednio w bazie (jak robi to
    zewnetrzny edytor koszyka) i przeliczonymi sumami.
    lines: [(product_id, unit_price, quantity), ...]
    """

    def _make(user_id, lines=(), recompute=True):
        cart = CartModel(
            id=user_id,
            total_price=Decimal("0.00"),
            item_count=0,
            final_amount_to_pay=Decimal("0.00"),
            version=1,
            last_updated=datetime.now(timezone.utc),
        )
        db.add(cart)
        for product_id, price, qty in lines:
            db.add(
                CartItemModel(
                    cart_id=user_id,
                    product_id=product_id,
                    product_name=f"Product {product_id}",
                    unit_price=Decimal(str(price)) if price is not None else None,
                    quantity=qty,
                    image_url=f"https://img/{product_id}.png",
                )
            )
        db.commit()
        if recompute:
            TotalRecalculator(db).recompute(user_id)
        return db.get(CartModel, user_id)

    return _make


@pytest.fixture
def make_gift_card(db):
    def _make(code, balance, is_active=True, expiration=None):
        amount = Decimal(str(balance))
        card = GiftCardModel(
            code=code,
            balance=amount,
            initial_balance=amount,
            is_active=is_active,
            expiration=expiration,
            version=1,
        )
        db.add(card)
        db.commit()
        return card

    return _make


