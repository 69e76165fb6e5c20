# settlement/services/order_service.py
from typing import Any, Dict

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
from settlement.repos.order_repo import OrderRepo
from settlement.services.notification_service import NotificationService
from settlement.utils.logging import get_logger

logger = get_logger(__name__)

# dozwolone przejscia statusu, zmienia je tylko administrator
STATUS_TRANSITIONS = {
    "pending": {"processing", "cancelled"},
    "processing": {"shipped", "cancelled"},
    "shipped": {"delivered"},
    "delivered": set(),
    "cancelled": set(),
}


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "order_id": order.order_id,
        "user_id": order.user_id,
        "customer_email": order.customer_email,
        "items": order.items,
        "total_price": order.total_price,
        "applied_discount_amount": order.applied_discount_amount,
        "applied_discount_code": order.applied_discount_code,
        "final_amount_paid": order.final_amount_paid,
        "shipping_address": order.shipping_address,
        "status": order.status,
        "created_at": order.created_at,
    }


class OrderService:
    """
    Odczyt zamowien i administracyjne zmiany statusu.
    Tworzenie zamowien to OrderFinalizer.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.notifications = NotificationService(db)

    def get_order(self, order_id: str, user_id: str | None, is_admin: bool = False) -> Dict[str, Any]:
        if not user_id:
            raise Unauthenticated("Authentication required")

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFound("Order not found")

        if order.user_id != user_id and not is_admin:
            raise NotFound("Order not found")

        return order_to_dict(order)

    def list_orders(self, user_id: str | None) -> list[Dict[str, Any]]:
        if not user_id:
            raise Unauthenticated("Authentication required")
        return [order_to_dict(o) for o in self.repo.list_orders_for_user(user_id)]

    def update_status(self, order_id: str, status: str) -> Dict[str, Any]:
        if status not in STATUS_TRANSITIONS:
            raise InvalidArgument(f"Unknown order status: {status}")

        result = run_in_transaction(
            self.db,
            lambda: self._update_status(order_id, status),
            name=f"order_status[{order_id}]",
        )
        mail_id = result.pop("mail_id")
        if mail_id:
            NotificationService.dispatch(mail_id)
        return result

    def _update_status(self, order_id: str, status: str) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFound("Order not found")

        current = order.status
        if status == current:
            return {**order_to_dict(order), "mail_id": None}
        if status not in STATUS_TRANSITIONS.get(current, set()):
            raise FailedPrecondition(f"Cannot change order status from {current} to {status}")

        if self.repo.update_order_status(order_id, current, status) == 0:
            raise ConcurrencyConflict()

        name = (order.shipping_address or {}).get("name") or "Customer"
        mail = self.notifications.enqueue_status_change(
            to=order.customer_email,
            order_id=order_id,
            customer_name=name,
            status=status,
            items=order.items or [],
        )

        logger.info(f"Order {order_id} status {current} -> {status}")
        return {**order_to_dict(order), "status": status, "mail_id": mail.id if mail else None}
