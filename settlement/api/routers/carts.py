# settlement/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from settlement.api.deps import get_caller_id, get_product_client
from settlement.data.database import get_db
from settlement.domain.errors import SettlementError
from settlement.domain.schemas import (
    ApplyDiscountIn,
    CartOut,
    DiscountAppliedOut,
    DiscountRemovedOut,
    ItemIn,
    QuantityIn,
)
from settlement.services.cart_service import CartService
from settlement.services.discount_ledger import DiscountLedger
from settlement.services.product_client import ProductClient

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session, product_client: ProductClient):
    return CartService(db=db, product_client=product_client)


@router.get("", response_model=CartOut)
def get_cart(
    caller_id: str | None = Depends(get_caller_id),
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
):
    svc = get_service(db, product_client)
    try:
        return svc.get_cart(caller_id)
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    caller_id: str | None = Depends(get_caller_id),
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
):
    svc = get_service(db, product_client)
    try:
        return svc.add_product(caller_id, payload.product_id, payload.quantity)
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/items/{product_id}", response_model=CartOut)
def set_quantity(
    product_id: str,
    payload: QuantityIn,
    caller_id: str | None = Depends(get_caller_id),
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
):
    svc = get_service(db, product_client)
    try:
        return svc.set_quantity(caller_id, product_id, payload.quantity)
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(
    product_id: str,
    caller_id: str | None = Depends(get_caller_id),
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
):
    svc = get_service(db, product_client)
    try:
        return svc.remove_product(caller_id, product_id)
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/discount", response_model=DiscountAppliedOut)
def apply_discount(
    payload: ApplyDiscountIn,
    caller_id: str | None = Depends(get_caller_id),
    db: Session = Depends(get_db),
):
    """Nalozenie karty podarunkowej na koszyk."""
    try:
        return DiscountLedger(db).apply(caller_id, payload.code, payload.cart_id)
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/discount", response_model=DiscountRemovedOut)
def remove_discount(
    caller_id: str | None = Depends(get_caller_id),
    db: Session = Depends(get_db),
):
    """Zdjecie karty i zwrot pobranej kwoty na karte."""
    try:
        return DiscountLedger(db).remove(caller_id)
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
