#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront.data.models.user import UserModel
from storefront.data.models.profile import ProfileModel
from storefront.data.models.product import ProductModel
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderModel
from storefront.data.models.order_line_item import OrderLineItemModel

__all__ = [
    "UserModel",
    "ProfileModel",
    "ProductModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderLineItemModel",
]
