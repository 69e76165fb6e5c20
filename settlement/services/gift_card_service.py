# settlement/services/gift_card_service.py
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from settlement.data.models.gift_card import GiftCardModel
from settlement.domain.errors import FailedPrecondition, InvalidArgument, NotFound
from settlement.domain.sanitize import as_utc, to_money
from settlement.repos.gift_card_repo import GiftCardRepo
from settlement.utils.logging import get_logger

logger = get_logger(__name__)


def gift_card_to_dict(card: GiftCardModel) -> Dict[str, Any]:
    return {
        "code": card.code,
        "balance": to_money(card.balance),
        "initial_balance": to_money(card.initial_balance),
        "is_active": card.is_active,
        "expiration": as_utc(card.expiration),
    }


class GiftCardService:
    """Wydawanie i podglad kart. Saldo zmienia wylacznie DiscountLedger."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = GiftCardRepo(db)

    def issue(
        self,
        code: str,
        balance: Decimal,
        is_active: bool = True,
        expiration: datetime | None = None,
    ) -> Dict[str, Any]:
        code = (code or "").strip()
        if not code:
            raise InvalidArgument("Gift card code is required")
        if Decimal(balance) < 0:
            raise InvalidArgument("Gift card balance cannot be negative")

        if self.repo.get_gift_card(code):
            raise FailedPrecondition(f"Gift card {code} already exists")

        amount = to_money(balance)
        card = self.repo.create_gift_card(
            GiftCardModel(
                code=code,
                balance=amount,
                initial_balance=amount,
                is_active=is_active,
                expiration=expiration,
                version=1,
            )
        )
        self.db.commit()

        logger.info(f"Gift card {code} issued with balance {amount}")
        return gift_card_to_dict(card)

    def get(self, code: str) -> Dict[str, Any]:
        card = self.repo.get_gift_card(code)
        if not card:
            raise NotFound("Gift card not found")
        return gift_card_to_dict(card)
