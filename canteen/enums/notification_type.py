from enum import Enum

class NotificationType(str, Enum):
    ORDER = "order"
    WALLET = "wallet"
    COUPON = "coupon"
    SYSTEM = "system"
