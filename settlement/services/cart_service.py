# settlement/services/cart_service.py
from datetime import datetime, timezone
from typing import Any, Callable, Dict

import requests
from sqlalchemy.orm import Session

from settlement.data.models.cart import CartModel
from settlement.data.models.cart_item import CartItemModel
from settlement.data.transaction import run_in_transaction
from settlement.domain.errors import (
    ConcurrencyConflict,
    InvalidArgument,
    NotFound,
    ServiceUnavailable,
    Unauthenticated,
)
from settlement.domain.sanitize import ZERO, normalize_line, to_money
from settlement.repos.cart_repo import CartRepo
from settlement.services.product_client import ProductClient
from settlement.utils.logging import get_logger

logger = get_logger(__name__)


def fire_recalculation(cart_id: str):
    # import lokalny: taski importuja serwisy
    from settlement.tasks.recalculate import recalculate_cart_totals_task

    try:
        recalculate_cart_totals_task.delay(cart_id)
    except Exception as e:
        logger.error(f"Could not enqueue totals recalculation for cart {cart_id}: {e}")


class CartService:
    """
    Edycja pozycji koszyka (add / set quantity / remove) i odczyt.

    Kazdy zapis pozycji podbija version koszyka w tej samej transakcji,
    dzieki temu rabat i finalizacja wykrywaja rownolegle zmiany pozycji.
    Po commicie odpalany jest trigger przeliczenia sum.
    """

    def __init__(
        self,
        db: Session,
        product_client: ProductClient,
        on_items_changed: Callable[[str], Any] = fire_recalculation,
    ):
        self.db = db
        self.repo = CartRepo(db)
        self.product_client = product_client
        self.on_items_changed = on_items_changed

    #query
    def get_cart(self, user_id: str | None) -> Dict[str, Any]:
        if not user_id:
            raise Unauthenticated("Authentication required")

        cart = self.repo.get_cart(user_id)
        if cart is None:
            return {
                "cart_id": user_id,
                "items": [],
                "total_price": ZERO,
                "item_count": 0,
                "applied_discount_code": None,
                "applied_discount_amount": None,
                "final_amount_to_pay": ZERO,
                "last_updated": None,
            }

        lines = [normalize_line(i) for i in self.repo.get_cart_items(user_id)]
        return {
            "cart_id": cart.id,
            "items": [
                {
                    "product_id": line.product_id,
                    "product_name": line.product_name,
                    "unit_price": line.unit_price,
                    "quantity": line.quantity,
                    "image_url": line.image_url,
                }
                for line in lines
            ],
            "total_price": to_money(cart.total_price),
            "item_count": cart.item_count,
            "applied_discount_code": cart.applied_discount_code,
            "applied_discount_amount": (
                to_money(cart.applied_discount_amount) if cart.applied_discount_code else None
            ),
            "final_amount_to_pay": to_money(cart.final_amount_to_pay),
            "last_updated": cart.last_updated,
        }

    #commands
    def add_product(self, user_id: str | None, product_id: str, quantity: int) -> Dict[str, Any]:
        if not user_id:
            raise Unauthenticated("Authentication required")
        if quantity <= 0:
            raise InvalidArgument("Quantity must be greater than 0")

        product = self._fetch_product(product_id)

        def work():
            cart = self._get_or_create_cart(user_id)
            existing = self.repo.get_cart_item(user_id, product_id)

            if existing:
                logger.info(
                    f"Product {product_id} already in cart {user_id}, quantity "
                    f"{existing.quantity} -> {(existing.quantity or 0) + quantity}"
                )
                existing.quantity = (existing.quantity or 0) + quantity
                self._apply_product_fields(existing, product)
            else:
                item = CartItemModel(cart_id=user_id, product_id=product_id, quantity=quantity)
                self._apply_product_fields(item, product)
                self.repo.add_cart_item(item)

            self._bump_version(cart)

        run_in_transaction(self.db, work, name=f"add_product[{user_id}]")
        self.on_items_changed(user_id)
        return self.get_cart(user_id)

    def set_quantity(self, user_id: str | None, product_id: str, quantity: int) -> Dict[str, Any]:
        if not user_id:
            raise Unauthenticated("Authentication required")
        if quantity <= 0:
            raise InvalidArgument("Quantity must be greater than 0")

        def work():
            cart = self.repo.get_cart(user_id)
            item = self.repo.get_cart_item(user_id, product_id) if cart else None
            if item is None:
                raise NotFound("Product is not in the cart")
            item.quantity = quantity
            self._bump_version(cart)

        run_in_transaction(self.db, work, name=f"set_quantity[{user_id}]")
        self.on_items_changed(user_id)
        return self.get_cart(user_id)

    def remove_product(self, user_id: str | None, product_id: str) -> Dict[str, Any]:
        if not user_id:
            raise Unauthenticated("Authentication required")

        def work():
            cart = self.repo.get_cart(user_id)
            if cart is None:
                raise NotFound("Cart not found")
            if self.repo.delete_cart_item(user_id, product_id) == 0:
                raise NotFound("Product is not in the cart")
            self._bump_version(cart)

        run_in_transaction(self.db, work, name=f"remove_product[{user_id}]")
        logger.info(f"Product {product_id} removed from cart {user_id}")
        self.on_items_changed(user_id)
        return self.get_cart(user_id)

    def _fetch_product(self, product_id: str) -> dict:
        try:
            return self.product_client.fetch_product(product_id)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                raise NotFound(f"Product {product_id} not found")
            raise ServiceUnavailable("Catalog service unavailable")
        except requests.RequestException:
            raise ServiceUnavailable("Catalog service unavailable")

    @staticmethod
    def _apply_product_fields(item: CartItemModel, product: dict):
        # cena i opis zamrazane w chwili zapisu pozycji
        item.unit_price = to_money(product.get("price"))
        item.product_name = product.get("name") or product.get("productName")
        item.image_url = product.get("imageUrl") or product.get("image_url")

    def _get_or_create_cart(self, user_id: str) -> CartModel:
        cart = self.repo.get_cart(user_id)
        if cart is None:
            logger.info(f"Creating cart for user {user_id}")
            cart = self.repo.create_cart(
                CartModel(
                    id=user_id,
                    total_price=ZERO,
                    item_count=0,
                    final_amount_to_pay=ZERO,
                    version=1,
                    last_updated=datetime.now(timezone.utc),
                )
            )
        return cart

    def _bump_version(self, cart: CartModel):
        self.db.flush()
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={
                "version": cart.version + 1,
                "last_updated": datetime.now(timezone.utc),
            },
        )
        if rowcount == 0:
            raise ConcurrencyConflict()
