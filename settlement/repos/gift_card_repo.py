# settlement/repos/gift_card_repo.py
from sqlalchemy import update
from sqlalchemy.orm import Session

from settlement.data.models.gift_card import GiftCardModel


class GiftCardRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_gift_card(self, code: str) -> GiftCardModel | None:
        return self.db.get(GiftCardModel, code)

    def create_gift_card(self, card: GiftCardModel) -> GiftCardModel:
        self.db.add(card)
        self.db.flush()
        return card

    def update_gift_card_version(self, code: str, old_version: int, new_data: dict) -> int:
        return self.db.execute(
            update(GiftCardModel)
            .where(GiftCardModel.code == code, GiftCardModel.version == old_version)
            .values(**new_data)
            .execution_options(synchronize_session=False)
        ).rowcount
