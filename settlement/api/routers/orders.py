# settlement/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from settlement.api.deps import get_caller_id, require_admin
from settlement.data.database import get_db
from settlement.domain.errors import SettlementError
from settlement.domain.schemas import FinalizeOrderIn, OrderOut, OrderPlacedOut, OrderStatusIn
from settlement.services.order_finalizer import OrderFinalizer
from settlement.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderPlacedOut, status_code=201)
def finalize_order(
    payload: FinalizeOrderIn,
    caller_id: str | None = Depends(get_caller_id),
    db: Session = Depends(get_db),
):
    """
    Checkout: zamienia koszyk wolajacego w zamowienie.
    Platnosc jest tylko symulowana.
    """
    try:
        return OrderFinalizer(db).finalize(caller_id, payload.email)
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("", response_model=List[OrderOut])
def list_orders(
    caller_id: str | None = Depends(get_caller_id),
    db: Session = Depends(get_db),
):
    try:
        return OrderService(db).list_orders(caller_id)
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    caller_id: str | None = Depends(get_caller_id),
    db: Session = Depends(get_db),
):
    try:
        return OrderService(db).get_order(order_id, caller_id)
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: str,
    payload: OrderStatusIn,
    admin_id: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        return OrderService(db).update_status(order_id, payload.status.value)
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
