from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from canteen.schemas.product.product import ProductRead


class CartItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)


class CartItemUpdate(BaseModel):
    quantity: Optional[int] = Field(default=None, validate_default=True)

    @field_validator("quantity")
    @classmethod
    def positive(cls, v):
        if v is None or v < 1:
            raise ValueError("Valid quantity is required")
        return v


class CartItemRead(BaseModel):
    id: str
    user_id: str
    product_id: str
    quantity: int
    product: Optional[ProductRead] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
