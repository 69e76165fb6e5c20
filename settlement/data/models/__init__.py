#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w Base.metadata

from settlement.data.models.user import UserModel
from settlement.data.models.cart import CartModel
from settlement.data.models.cart_item import CartItemModel
from settlement.data.models.gift_card import GiftCardModel
from settlement.data.models.order import OrderModel
from settlement.data.models.mail import MailModel

__all__ = ["UserModel", "CartModel", "CartItemModel", "GiftCardModel", "OrderModel", "MailModel"]
