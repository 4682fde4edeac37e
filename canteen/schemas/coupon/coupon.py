from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator


class CouponCreate(BaseModel):
    code: Optional[str] = None
    amount: Optional[float] = None
    description: Optional[str] = None
    valid_until: Optional[datetime] = None
    user_ids: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def required(self):
        if not self.code or not self.amount:
            raise ValueError("Code and amount are required")
        if self.amount < 0:
            raise ValueError("Amount must be positive")
        return self


class CouponUpdate(BaseModel):
    is_active: Optional[bool] = None
    valid_until: Optional[datetime] = None


class CouponRedeem(BaseModel):
    coupon_code: Optional[str] = None

    @model_validator(mode="after")
    def required(self):
        if not self.coupon_code:
            raise ValueError("Coupon code is required")
        return self


class CouponRead(BaseModel):
    id: str
    code: str
    amount: float
    description: Optional[str] = None
    valid_until: Optional[datetime] = None
    is_active: bool
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
