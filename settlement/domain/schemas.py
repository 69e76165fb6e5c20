# settlement/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class OrderStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


class ItemIn(BaseModel):
    """Dodanie produktu do koszyka."""

    product_id: str = Field(..., min_length=1, max_length=128)
    quantity: int = Field(..., gt=0, description="Ilosc produktu (musi byc > 0)")


class QuantityIn(BaseModel):
    quantity: int = Field(..., gt=0)


class CartLineOut(BaseModel):
    product_id: str
    product_name: str
    unit_price: Decimal
    quantity: int
    image_url: str | None = None


class CartOut(BaseModel):
    cart_id: str
    items: List[CartLineOut]
    total_price: Decimal
    item_count: int
    applied_discount_code: str | None = None
    applied_discount_amount: Decimal | None = None
    final_amount_to_pay: Decimal
    last_updated: datetime | None = None


class ApplyDiscountIn(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    cart_id: str | None = Field(None, description="Domyslnie koszyk wolajacego")


class DiscountAppliedOut(BaseModel):
    cart_id: str
    code: str
    amount_applied: Decimal
    final_amount_to_pay: Decimal
    remaining_balance: Decimal


class DiscountRemovedOut(BaseModel):
    cart_id: str
    removed: bool
    message: str
    refunded_amount: Decimal
    final_amount_to_pay: Decimal


class FinalizeOrderIn(BaseModel):
    # brak adresu = email z profilu
    email: str | None = Field(None, max_length=320)


class OrderPlacedOut(BaseModel):
    order_id: str
    final_amount_paid: Decimal


class OrderItemOut(BaseModel):
    productId: str
    productName: str
    unitPrice: Decimal
    quantity: int
    imageUrl: str | None = None


class ShippingAddressOut(BaseModel):
    name: str = ""
    surname: str = ""
    address: str = ""
    city: str = ""
    postcode: str = ""


class OrderOut(BaseModel):
    order_id: str
    user_id: str
    customer_email: str
    items: List[OrderItemOut]
    total_price: Decimal
    applied_discount_amount: Decimal
    applied_discount_code: str | None = None
    final_amount_paid: Decimal
    shipping_address: ShippingAddressOut
    status: OrderStatus
    created_at: datetime


class OrderStatusIn(BaseModel):
    status: OrderStatus


class GiftCardCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    balance: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    is_active: bool = True
    expiration: datetime | None = None


class GiftCardOut(BaseModel):
    code: str
    balance: Decimal
    initial_balance: Decimal
    is_active: bool
    expiration: datetime | None = None


class UserProfileIn(BaseModel):
    name: str | None = Field(None, max_length=100)
    surname: str | None = Field(None, max_length=100)
    email: EmailStr | None = None
    address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    postcode: str | None = Field(None, max_length=20)


class UserProfileOut(UserProfileIn):
    id: str

    model_config = ConfigDict(from_attributes=True)
