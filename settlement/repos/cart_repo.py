# settlement/repos/cart_repo.py
from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from settlement.data.models.cart import CartModel
from settlement.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart(self, cart_id: str) -> CartModel | None:
        return self.db.get(CartModel, cart_id)

    def create_cart(self, cart: CartModel) -> CartModel:
        # bez commita, koszyk powstaje w transakcji wolajacego
        self.db.add(cart)
        self.db.flush()
        return cart

    def get_cart_items(self, cart_id: str) -> list[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .where(CartItemModel.cart_id == cart_id)
                .order_by(CartItemModel.id)
            ).scalars()
        )

    def get_cart_item(self, cart_id: str, product_id: str) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, cart_id: str, product_id: str) -> int:
        return self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).rowcount

    def delete_all_items(self, cart_id: str) -> int:
        return self.db.execute(
            delete(CartItemModel).where(CartItemModel.cart_id == cart_id)
        ).rowcount

    def update_cart_version(self, cart_id: str, old_version: int, new_data: dict) -> int:
        """
        Optimistic locking: UPDATE carts SET ... WHERE id = :id AND version = :old.
        0 zmienionych wierszy = ktos zdazyl zmienic koszyk.
        """
        return self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.version == old_version)
            .values(**new_data)
            .execution_options(synchronize_session=False)
        ).rowcount
