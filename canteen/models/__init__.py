from canteen.models.user.user import User
from canteen.models.product.product import Product
from canteen.models.cart.cart_item import CartItem
from canteen.models.order.order import Order
from canteen.models.order.order_item import OrderItem
from canteen.models.wallet.wallet_transaction import WalletTransaction
from canteen.models.coupon.coupon import Coupon
from canteen.models.coupon.user_coupon import UserCoupon
from canteen.models.notification.notification import Notification

__all__ = [
    "User",
    "Product",
    "CartItem",
    "Order",
    "OrderItem",
    "WalletTransaction",
    "Coupon",
    "UserCoupon",
    "Notification",
]
