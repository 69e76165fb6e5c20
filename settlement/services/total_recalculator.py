# settlement/services/total_recalculator.py
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from settlement.data.transaction import run_in_transaction
from settlement.domain.errors import ConcurrencyConflict, NotFound
from settlement.domain.sanitize import normalize_line, to_money
from settlement.domain.totals import CartSummary, payable_amount, sum_lines
from settlement.repos.cart_repo import CartRepo
from settlement.utils.logging import get_logger

logger = get_logger(__name__)


class TotalRecalculator:
    """
    Przelicza podsumowanie koszyka od zera z aktualnego zbioru pozycji.

    Zadnych przyrostow +/-: wynik zalezy tylko od tego co teraz lezy
    w cart_items, wiec powtorzenie albo przestawienie wywolan daje ten sam
    stan. Zapis idzie warunkowo po version, przeliczenie zrobione na starym
    zbiorze pozycji przegrywa i jest powtarzane na swiezym odczycie.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)

    def recompute(self, cart_id: str) -> CartSummary:
        return run_in_transaction(
            self.db,
            lambda: self._recompute(cart_id),
            name=f"recompute_totals[{cart_id}]",
        )

    def _recompute(self, cart_id: str) -> CartSummary:
        cart = self.repo.get_cart(cart_id)
        if cart is None:
            raise NotFound(f"Cart {cart_id} not found")

        lines = [normalize_line(i) for i in self.repo.get_cart_items(cart_id)]
        total, count = sum_lines(lines)

        # rabat zostaje jaki byl, przeliczamy tylko kwote do zaplaty
        code = cart.applied_discount_code
        discount = to_money(cart.applied_discount_amount) if code else None
        final = payable_amount(total, code, discount)

        summary = CartSummary(
            cart_id=cart_id,
            total_price=total,
            item_count=count,
            applied_discount_code=code,
            applied_discount_amount=discount,
            final_amount_to_pay=final,
        )

        unchanged = (
            to_money(cart.total_price) == total
            and cart.item_count == count
            and to_money(cart.final_amount_to_pay) == final
        )
        if unchanged:
            logger.debug(f"Cart {cart_id} totals already up to date")
            return summary

        rowcount = self.repo.update_cart_version(
            cart_id=cart_id,
            old_version=cart.version,
            new_data={
                "total_price": total,
                "item_count": count,
                "final_amount_to_pay": final,
                "last_updated": datetime.now(timezone.utc),
                "version": cart.version + 1,
            },
        )
        if rowcount == 0:
            raise ConcurrencyConflict()

        logger.info(
            f"Cart {cart_id} recalculated: total={total} items={count} payable={final}"
        )
        return summary
