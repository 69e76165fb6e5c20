# settlement/services/order_finalizer.py
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from settlement.data.models.order import OrderModel
from settlement.data.transaction import run_in_transaction
from settlement.domain.errors import (
    ConcurrencyConflict,
    FailedPrecondition,
    InvalidArgument,
    NotFound,
    Unauthenticated,
)
from settlement.domain.sanitize import ZERO, normalize_line, to_money
from settlement.domain.totals import payable_amount, sum_lines
from settlement.repos.cart_repo import CartRepo
from settlement.repos.order_repo import OrderRepo
from settlement.repos.user_repo import UserRepo
from settlement.services.notification_service import NotificationService
from settlement.utils.logging import get_logger

logger = get_logger(__name__)

_email_adapter = TypeAdapter(EmailStr)

SHIPPING_FIELDS = ("name", "surname", "address", "city", "postcode")


def make_order_id(user_id: str, created_at: datetime) -> str:
    return f"{user_id}_{int(created_at.timestamp() * 1000)}"


class OrderFinalizer:
    """
    Zamiana koszyka w niezmienne zamowienie.

    W jednej transakcji: snapshot pozycji, nowe zamowienie (pending),
    usuniecie pozycji, wyzerowanie podsumowania koszyka i mail w outboxie.
    Albo wszystko, albo nic. Ponowienie po udanym commicie trafia na pusty
    koszyk i konczy sie bledem, wiec drugie zamowienie nie powstanie.
    """

    def __init__(self, db: Session):
        self.db = db
        self.carts = CartRepo(db)
        self.orders = OrderRepo(db)
        self.users = UserRepo(db)
        self.notifications = NotificationService(db)

    def finalize(self, caller_id: str | None, notification_address: str | None = None) -> Dict[str, Any]:
        if not caller_id:
            raise Unauthenticated("Authentication required")

        email = self._resolve_address(caller_id, notification_address)

        result = run_in_transaction(
            self.db,
            lambda: self._finalize(caller_id, email),
            name=f"finalize_order[{caller_id}]",
        )

        NotificationService.dispatch(result.pop("mail_id"))
        return result

    def _resolve_address(self, user_id: str, address: str | None) -> str:
        if isinstance(address, str):
            address = address.strip()
        if not address:
            profile = self.users.get_user(user_id)
            address = (profile.email or "").strip() if profile else ""
        if not address:
            raise InvalidArgument("Email address is required to place an order")
        try:
            return str(_email_adapter.validate_python(address))
        except ValidationError:
            raise InvalidArgument(f"Invalid email address: {address}")

    def _shipping_snapshot(self, user_id: str) -> dict:
        profile = self.users.get_user(user_id)
        return {
            field: (getattr(profile, field, None) or "") if profile else ""
            for field in SHIPPING_FIELDS
        }

    def _finalize(self, user_id: str, email: str) -> Dict[str, Any]:
        # faza 1: odczyty
        cart = self.carts.get_cart(user_id)
        if cart is None:
            raise NotFound("Cart not found")

        items = self.carts.get_cart_items(user_id)
        if not items:
            raise FailedPrecondition("Cart is empty")

        shipping = self._shipping_snapshot(user_id)

        # faza 2: logika, bez zapisow
        lines = [normalize_line(i) for i in items]
        total, _ = sum_lines(lines)
        code = cart.applied_discount_code
        discount = to_money(cart.applied_discount_amount) if code else ZERO
        final = payable_amount(total, code, discount)

        if total != to_money(cart.total_price) or final != to_money(cart.final_amount_to_pay):
            logger.warning(
                f"Cart {user_id} summary was stale at checkout "
                f"(stored total={cart.total_price} payable={cart.final_amount_to_pay}, "
                f"actual total={total} payable={final})"
            )

        created_at = datetime.now(timezone.utc)
        order_id = make_order_id(user_id, created_at)

        # faza 3: zapisy
        self.orders.create_order(
            OrderModel(
                order_id=order_id,
                user_id=user_id,
                customer_email=email,
                items=[line.as_dict() for line in lines],
                total_price=total,
                applied_discount_amount=discount,
                applied_discount_code=code,
                final_amount_paid=final,
                shipping_address=shipping,
                status="pending",
                created_at=created_at,
            )
        )

        self.carts.delete_all_items(user_id)

        rowcount = self.carts.update_cart_version(
            cart_id=user_id,
            old_version=cart.version,
            new_data={
                "total_price": ZERO,
                "item_count": 0,
                "applied_discount_code": None,
                "applied_discount_amount": None,
                "final_amount_to_pay": ZERO,
                "last_updated": created_at,
                "version": cart.version + 1,
            },
        )
        if rowcount == 0:
            raise ConcurrencyConflict()

        mail = self.notifications.enqueue_order_confirmation(
            to=email,
            order_id=order_id,
            customer_name=shipping["name"] or email.split("@")[0],
            lines=lines,
            subtotal=total,
            discount=discount,
            total=final,
        )

        logger.info(
            f"Order {order_id} created from cart {user_id}: "
            f"total={total} discount={discount} paid={final}"
        )
        return {
            "order_id": order_id,
            "final_amount_paid": final,
            "mail_id": mail.id,
        }
