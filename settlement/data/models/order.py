# settlement/data/models/order.py
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Numeric, JSON

from settlement.data.database import Base

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")


class OrderModel(Base):
    __tablename__ = "orders"

    order_id = Column(String(160), primary_key=True)
    user_id = Column(String(128), nullable=False, index=True)
    customer_email = Column(String(320), nullable=False)

    # kopia pozycji z chwili zamowienia, nie referencja do katalogu
    items = Column(JSON, nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    applied_discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    applied_discount_code = Column(String(64), nullable=True)
    final_amount_paid = Column(Numeric(12, 2), nullable=False)
    shipping_address = Column(JSON, nullable=False)

    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
