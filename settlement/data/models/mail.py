# settlement/data/models/mail.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from settlement.data.database import Base


class MailModel(Base):
    """Outbox powiadomien: wiersz powstaje w tej samej transakcji co zmiana, ktora go wywolala."""

    __tablename__ = "mail"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    recipient = Column(String(320), nullable=False)
    subject = Column(String(255), nullable=False)
    html = Column(Text, nullable=False)
    order_id = Column(String(160), nullable=True, index=True)

    attempts = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    sent_at = Column(DateTime(timezone=True), nullable=True)
