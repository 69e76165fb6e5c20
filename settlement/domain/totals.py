# settlement/domain/totals.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from settlement.domain.sanitize import LineSnapshot, ZERO, to_money


@dataclass(frozen=True)
class CartSummary:
    cart_id: str
    total_price: Decimal
    item_count: int
    applied_discount_code: str | None
    applied_discount_amount: Decimal | None
    final_amount_to_pay: Decimal

    def as_dict(self) -> dict:
        return {
            "cart_id": self.cart_id,
            "total_price": str(self.total_price),
            "item_count": self.item_count,
            "applied_discount_code": self.applied_discount_code,
            "applied_discount_amount": (
                str(self.applied_discount_amount)
                if self.applied_discount_amount is not None
                else None
            ),
            "final_amount_to_pay": str(self.final_amount_to_pay),
        }


def sum_lines(lines: Iterable[LineSnapshot]) -> tuple[Decimal, int]:
    """Pelne przeliczenie (total, ilosc sztuk) z aktualnego zbioru pozycji."""
    total = ZERO
    count = 0
    for line in lines:
        total += line.line_total
        count += line.quantity
    return to_money(total), count


def payable_amount(
    total_price: Decimal,
    discount_code: str | None,
    discount_amount: Decimal | None,
) -> Decimal:
    """
    Kwota do zaplaty. Rabat nie jest tu przycinany do nowej sumy,
    jedynie wynik nie schodzi ponizej zera.
    """
    amount = to_money(discount_amount)
    if not discount_code or amount <= 0:
        return to_money(total_price)
    return max(ZERO, to_money(total_price) - amount)
