from enum import Enum

# user, canteen, admin
class UserRole(str, Enum):
    USER = "user"
    CANTEEN = "canteen"
    ADMIN = "admin"
