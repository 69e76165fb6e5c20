# settlement/domain/sanitize.py
"""
Normalizacja danych z koszyka przed jakimikolwiek obliczeniami.

Stare rekordy moga miec NULL albo smieci w cenie, ilosci czy nazwie.
Zamiast przerywac checkout, kazde pole jest sprowadzane do bezpiecznej
wartosci domyslnej w jednym miejscu.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
UNKNOWN_PRODUCT_NAME = "Unknown product"


def to_money(value: Any) -> Decimal:
    """Decimal zaokraglony do groszy, wszystko nieparsowalne/ujemne -> 0.00."""
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return ZERO
    if not amount.is_finite() or amount < 0:
        return ZERO
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_quantity(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        qty = int(value)
    except (TypeError, ValueError):
        return 0
    return qty if qty > 0 else 0


def to_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        return UNKNOWN_PRODUCT_NAME
    return value.strip()


def as_utc(value: datetime | None) -> datetime | None:
    # sqlite zwraca naiwne daty, traktujemy je jako UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class LineSnapshot:
    product_id: str
    product_name: str
    unit_price: Decimal
    quantity: int
    image_url: str | None

    @property
    def line_total(self) -> Decimal:
        return (self.unit_price * self.quantity).quantize(CENT)

    def as_dict(self) -> dict:
        # JSON nie zna Decimal, cena jako string
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "unitPrice": str(self.unit_price),
            "quantity": self.quantity,
            "imageUrl": self.image_url,
        }


def normalize_line(item) -> LineSnapshot:
    image = getattr(item, "image_url", None)
    return LineSnapshot(
        product_id=str(item.product_id),
        product_name=to_name(getattr(item, "product_name", None)),
        unit_price=to_money(getattr(item, "unit_price", None)),
        quantity=to_quantity(getattr(item, "quantity", None)),
        image_url=image if isinstance(image, str) and image else None,
    )
