from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from canteen.enums.delivery_type import DeliveryType
from canteen.enums.order_status import OrderStatus
from canteen.schemas.product.product import ProductRead


class OrderLineCreate(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)


class OrderCreate(BaseModel):
    cart_items: List[OrderLineCreate] = Field(default_factory=list)
    delivery_type: Optional[str] = None
    room_number: Optional[str] = None
    notes: Optional[str] = None
    wallet_amount_used: float = Field(default=0.0, ge=0)
    razorpay_payment_id: Optional[str] = None

    @model_validator(mode="after")
    def check_delivery(self):
        if not self.cart_items:
            raise ValueError("Cart is empty")
        if self.delivery_type not in [delivery.value for delivery in DeliveryType]:
            raise ValueError("Valid delivery type is required")
        if self.delivery_type == DeliveryType.CLASSROOM.value and not self.room_number:
            raise ValueError("Room number is required for classroom delivery")
        return self


class OrderAction(BaseModel):
    action: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: Optional[OrderStatus] = Field(default=None, validate_default=True)

    @field_validator("status", mode="before")
    @classmethod
    def known_status(cls, v):
        if v not in OrderStatus.values():
            raise ValueError("Valid status is required")
        return v


class OrderCustomer(BaseModel):
    id: str
    name: str
    email: str
    phone_number: Optional[str] = None

    class Config:
        from_attributes = True


class OrderItemRead(BaseModel):
    id: str
    product_id: str
    quantity: int
    price_at_time: float
    product: Optional[ProductRead] = None
    created_at: datetime

    class Config:
        from_attributes = True


class OrderRead(BaseModel):
    id: str
    user_id: str
    total_amount: float
    wallet_amount_used: float
    razorpay_payment_id: Optional[str] = None
    status: OrderStatus
    delivery_type: DeliveryType
    room_number: Optional[str] = None
    notes: Optional[str] = None
    items: List[OrderItemRead] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CanteenOrderRead(OrderRead):
    user: Optional[OrderCustomer] = None
