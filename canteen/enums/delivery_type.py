from enum import Enum

class DeliveryType(str, Enum):
    CANTEEN = "canteen"
    CLASSROOM = "classroom"
