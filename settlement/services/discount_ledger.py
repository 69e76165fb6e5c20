# settlement/services/discount_ledger.py
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy.orm import Session

from settlement.data.transaction import run_in_transaction
from settlement.domain.errors import (
    ConcurrencyConflict,
    FailedPrecondition,
    InvalidArgument,
    NotFound,
    Unauthenticated,
)
from settlement.domain.sanitize import ZERO, as_utc, to_money
from settlement.repos.cart_repo import CartRepo
from settlement.repos.gift_card_repo import GiftCardRepo
from settlement.utils.logging import get_logger

logger = get_logger(__name__)


def resolve_cart_id(caller_id: str | None, cart_id: str | None) -> str:
    """Koszyk = wlasciciel. Podany cart_id musi byc koszykiem wolajacego."""
    if not caller_id:
        raise Unauthenticated("Authentication required")
    if cart_id is not None and cart_id != caller_id:
        raise InvalidArgument("Cart does not belong to the caller")
    return caller_id


class DiscountLedger:
    """
    Przenoszenie salda miedzy karta podarunkowa a koszykiem.

    Obie strony (saldo karty i pola rabatu w koszyku) zmieniaja sie w jednej
    transakcji z warunkiem na version obu wierszy, wiec nie ma stanu
    posredniego: karta obciazona a koszyk bez rabatu, albo odwrotnie.
    Jeden koszyk = maksymalnie jedna karta.
    """

    def __init__(self, db: Session):
        self.db = db
        self.carts = CartRepo(db)
        self.gift_cards = GiftCardRepo(db)

    def apply(self, caller_id: str | None, code: str | None, cart_id: str | None = None) -> Dict[str, Any]:
        cart_id = resolve_cart_id(caller_id, cart_id)
        code = (code or "").strip()
        if not code:
            raise InvalidArgument("Gift card code is required")

        return run_in_transaction(
            self.db,
            lambda: self._apply(cart_id, code),
            name=f"apply_discount[{cart_id}]",
        )

    def _apply(self, cart_id: str, code: str) -> Dict[str, Any]:
        card = self.gift_cards.get_gift_card(code)
        if card is None:
            raise NotFound("Gift card not found")

        balance = to_money(card.balance)
        if not card.is_active:
            raise FailedPrecondition("Gift card is not active")
        expiration = as_utc(card.expiration)
        if expiration is not None and expiration <= datetime.now(timezone.utc):
            raise FailedPrecondition("Gift card has expired")
        if balance <= 0:
            raise FailedPrecondition("Gift card balance is empty")

        cart = self.carts.get_cart(cart_id)
        if cart is None:
            raise NotFound("Cart not found")
        if cart.applied_discount_code:
            raise FailedPrecondition(
                "A gift card is already applied to this cart, remove it first"
            )

        total = to_money(cart.total_price)
        amount = min(balance, total)
        if amount <= 0:
            raise FailedPrecondition("Nothing to apply, the cart total is zero")

        remaining = balance - amount
        final = total - amount

        card_rows = self.gift_cards.update_gift_card_version(
            code=code,
            old_version=card.version,
            new_data={"balance": remaining, "version": card.version + 1},
        )
        cart_rows = self.carts.update_cart_version(
            cart_id=cart_id,
            old_version=cart.version,
            new_data={
                "applied_discount_code": code,
                "applied_discount_amount": amount,
                "final_amount_to_pay": final,
                "last_updated": datetime.now(timezone.utc),
                "version": cart.version + 1,
            },
        )
        if card_rows == 0 or cart_rows == 0:
            raise ConcurrencyConflict()

        logger.info(
            f"Gift card {code} applied to cart {cart_id}: amount={amount} "
            f"payable={final} remaining_balance={remaining}"
        )
        return {
            "cart_id": cart_id,
            "code": code,
            "amount_applied": amount,
            "final_amount_to_pay": final,
            "remaining_balance": remaining,
        }

    def remove(self, caller_id: str | None, cart_id: str | None = None) -> Dict[str, Any]:
        cart_id = resolve_cart_id(caller_id, cart_id)
        return run_in_transaction(
            self.db,
            lambda: self._remove(cart_id),
            name=f"remove_discount[{cart_id}]",
        )

    def _remove(self, cart_id: str) -> Dict[str, Any]:
        cart = self.carts.get_cart(cart_id)
        if cart is None:
            raise NotFound("Cart not found")

        total = to_money(cart.total_price)
        code = cart.applied_discount_code
        if not code:
            return {
                "cart_id": cart_id,
                "removed": False,
                "message": "No gift card applied",
                "refunded_amount": ZERO,
                "final_amount_to_pay": to_money(cart.final_amount_to_pay),
            }

        # zwracamy dokladnie to co zostalo pobrane, nie przeliczona kwote
        amount = to_money(cart.applied_discount_amount)
        refunded = ZERO

        card = self.gift_cards.get_gift_card(code)
        if card is not None:
            card_rows = self.gift_cards.update_gift_card_version(
                code=code,
                old_version=card.version,
                new_data={
                    "balance": to_money(card.balance) + amount,
                    "version": card.version + 1,
                },
            )
            if card_rows == 0:
                raise ConcurrencyConflict()
            refunded = amount
        else:
            logger.warning(
                f"Gift card {code} no longer exists, clearing discount on cart {cart_id} without refund"
            )

        cart_rows = self.carts.update_cart_version(
            cart_id=cart_id,
            old_version=cart.version,
            new_data={
                "applied_discount_code": None,
                "applied_discount_amount": None,
                "final_amount_to_pay": total,
                "last_updated": datetime.now(timezone.utc),
                "version": cart.version + 1,
            },
        )
        if cart_rows == 0:
            raise ConcurrencyConflict()

        logger.info(f"Gift card {code} removed from cart {cart_id}, refunded={refunded}")
        return {
            "cart_id": cart_id,
            "removed": True,
            "message": "Gift card removed",
            "refunded_amount": refunded,
            "final_amount_to_pay": total,
        }
