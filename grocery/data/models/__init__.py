# import every model so SQLAlchemy registers it in Base.metadata

from grocery.data.models.user import UserModel
from grocery.data.models.profile import ProfileModel
from grocery.data.models.category import CategoryModel
from grocery.data.models.product import ProductModel
from grocery.data.models.cart import CartLineModel
from grocery.data.models.order import OrderModel
from grocery.data.models.order_item import OrderItemModel

# attaches profile provisioning to UserModel
import grocery.data.hooks  # noqa: E402,F401

__all__ = [
    "UserModel",
    "ProfileModel",
    "CategoryModel",
    "ProductModel",
    "CartLineModel",
    "OrderModel",
    "OrderItemModel",
]
