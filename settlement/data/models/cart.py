# settlement/data/models/cart.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Numeric
from sqlalchemy.orm import relationship

from settlement.data.database import Base


class CartModel(Base):
    __tablename__ = "carts"

    # koszyk = wlasciciel, jeden na klienta
    id = Column(String(128), primary_key=True)

    total_price = Column(Numeric(12, 2), nullable=False, default=0)
    item_count = Column(Integer, nullable=False, default=0)
    applied_discount_code = Column(String(64), nullable=True)
    applied_discount_amount = Column(Numeric(12, 2), nullable=True)
    final_amount_to_pay = Column(Numeric(12, 2), nullable=False, default=0)

    version = Column(Integer, nullable=False, default=1)
    last_updated = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
    )
