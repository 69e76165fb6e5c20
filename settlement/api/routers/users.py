# settlement/api/routers/users.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from settlement.api.deps import get_caller_id
from settlement.data.database import get_db
from settlement.domain.errors import SettlementError
from settlement.domain.schemas import UserProfileIn, UserProfileOut
from settlement.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.put("/me", response_model=UserProfileOut)
def save_profile(
    payload: UserProfileIn,
    caller_id: str | None = Depends(get_caller_id),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    try:
        return service.save_profile(caller_id, payload)
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/me", response_model=UserProfileOut)
def get_profile(
    caller_id: str | None = Depends(get_caller_id),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    try:
        return service.get_profile(caller_id)
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
