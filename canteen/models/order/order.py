from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship, SQLModel
from sqlalchemy import Column, Enum

from canteen.core.utils.identifiers import generate_id, short_id
from canteen.enums.delivery_type import DeliveryType
from canteen.enums.order_status import OrderStatus

if TYPE_CHECKING:
    from canteen.models.order.order_item import OrderItem
    from canteen.models.user.user import User


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: str = Field(default_factory=generate_id, primary_key=True)

    user_id: str = Field(foreign_key="users.id", index=True)
    user: Optional["User"] = Relationship(back_populates="orders")

    total_amount: float = Field(default=0.0)
    wallet_amount_used: float = Field(default=0.0)
    razorpay_payment_id: Optional[str] = Field(default=None)

    status: OrderStatus = Field(default=OrderStatus.PENDING, sa_column=Column(Enum(OrderStatus), nullable=False, index=True))

    delivery_type: DeliveryType = Field(default=DeliveryType.CANTEEN, sa_column=Column(Enum(DeliveryType), nullable=False))
    room_number: Optional[str] = None
    notes: Optional[str] = None

    items: List["OrderItem"] = Relationship(back_populates="order")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def code(self) -> str:
        return short_id(self.id)
