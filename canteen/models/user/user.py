from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship, SQLModel
from sqlalchemy import Column, Enum

from canteen.core.utils.identifiers import generate_id
from canteen.enums.user_role import UserRole

if TYPE_CHECKING:
    from canteen.models.cart.cart_item import CartItem
    from canteen.models.order.order import Order
    from canteen.models.notification.notification import Notification
    from canteen.models.wallet.wallet_transaction import WalletTransaction


# Appended to the email of a deleted account; never part of a valid address.
DELETED_EMAIL_MARKER = "#deleted-"


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=generate_id, primary_key=True)

    name: str
    email: str = Field(index=True, unique=True)
    password_hash: str
    phone_number: Optional[str] = Field(default=None)

    role: UserRole = Field(default=UserRole.USER, sa_column=Column(Enum(UserRole), nullable=False))
    wallet_balance: float = Field(default=0.0)

    cart_items: List["CartItem"] = Relationship(back_populates="user")
    orders: List["Order"] = Relationship(back_populates="user")
    notifications: List["Notification"] = Relationship(back_populates="user")
    wallet_transactions: List["WalletTransaction"] = Relationship(back_populates="user")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    deleted_at: Optional[datetime] = Field(default=None)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self, now: Optional[datetime] = None) -> None:
        """Marks the account deleted and releases its email for a new account."""
        self.deleted_at = now or datetime.now(timezone.utc)
        self.email = f"{self.email}{DELETED_EMAIL_MARKER}{self.id}"
