# settlement/repos/order_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from settlement.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: str) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def list_orders_for_user(self, user_id: str) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc())
            ).scalars()
        )

    def update_order_status(self, order_id: str, old_status: str, status: str) -> int:
        # warunek na stary status, dwie rownolegle zmiany nie nadpisza sie nawzajem
        return self.db.execute(
            update(OrderModel)
            .where(OrderModel.order_id == order_id, OrderModel.status == old_status)
            .values(status=status)
            .execution_options(synchronize_session=False)
        ).rowcount
