# settlement/api/routers/gift_cards.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from settlement.api.deps import get_caller_id, require_admin
from settlement.data.database import get_db
from settlement.domain.errors import SettlementError
from settlement.domain.schemas import GiftCardCreate, GiftCardOut
from settlement.services.gift_card_service import GiftCardService

router = APIRouter(prefix="/gift-cards", tags=["gift-cards"])


@router.post("", response_model=GiftCardOut, status_code=201)
def issue_gift_card(
    payload: GiftCardCreate,
    admin_id: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        return GiftCardService(db).issue(
            code=payload.code,
            balance=payload.balance,
            is_active=payload.is_active,
            expiration=payload.expiration,
        )
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{code}", response_model=GiftCardOut)
def get_gift_card(
    code: str,
    caller_id: str | None = Depends(get_caller_id),
    db: Session = Depends(get_db),
):
    if not caller_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        return GiftCardService(db).get(code)
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
