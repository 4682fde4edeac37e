from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from canteen.enums.wallet_transaction_type import WalletTransactionType


class TopUpRequest(BaseModel):
    amount: Optional[float] = None

    @model_validator(mode="after")
    def positive_amount(self):
        if self.amount is None or self.amount <= 0:
            raise ValueError("Valid amount is required")
        return self


class TopUpVerification(BaseModel):
    razorpay_payment_id: Optional[str] = None
    razorpay_order_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    amount: float = Field(gt=0)

    @model_validator(mode="after")
    def complete(self):
        if not (self.razorpay_payment_id and self.razorpay_order_id and self.razorpay_signature):
            raise ValueError("Missing payment verification details")
        return self


class WalletTransactionRead(BaseModel):
    id: str
    user_id: str
    amount: float
    type: WalletTransactionType
    description: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_order_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
