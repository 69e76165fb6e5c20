# settlement/api/deps.py
from fastapi import Header, HTTPException

from settlement.services.product_client import ProductClient
from settlement.utils.settings import ADMIN_USER_IDS


def get_caller_id(x_user_id: str | None = Header(default=None)) -> str | None:
    """
    Tozsamosc ustawiana przez gateway po uwierzytelnieniu.
    Brak naglowka przekazujemy dalej jako None, serwis zglosi Unauthenticated.
    """
    if x_user_id is None:
        return None
    return x_user_id.strip() or None


def require_admin(x_user_id: str | None = Header(default=None)) -> str:
    caller = (x_user_id or "").strip()
    if not caller:
        raise HTTPException(status_code=401, detail="Authentication required")
    if caller not in ADMIN_USER_IDS:
        raise HTTPException(status_code=403, detail="Admin privileges required")
    return caller


def get_product_client() -> ProductClient:
    return ProductClient()
