# settlement/data/models/gift_card.py
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, Numeric, String

from settlement.data.database import Base


class GiftCardModel(Base):
    __tablename__ = "gift_cards"

    code = Column(String(64), primary_key=True)
    balance = Column(Numeric(12, 2), nullable=False)
    initial_balance = Column(Numeric(12, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    expiration = Column(DateTime(timezone=True), nullable=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (CheckConstraint("balance >= 0", name="ck_gift_card_balance_non_negative"),)
