#import all models so SQLAlchemy registers them in Base.metadata

from phonedeals.data.models.user import UserModel
from phonedeals.data.models.phone import PhoneModel, ReviewModel
from phonedeals.data.models.cart import CartModel
from phonedeals.data.models.cart_item import CartItemModel
from phonedeals.data.models.wishlist import WishlistModel, WishlistItemModel
from phonedeals.data.models.order import OrderModel, OrderItemModel

__all__ = [
    "UserModel",
    "PhoneModel",
    "ReviewModel",
    "CartModel",
    "CartItemModel",
    "WishlistModel",
    "WishlistItemModel",
    "OrderModel",
    "OrderItemModel",
]
