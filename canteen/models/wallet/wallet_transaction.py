from datetime import datetime, timezone
from typing import Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship, SQLModel
from sqlalchemy import Column, Enum

from canteen.core.utils.identifiers import generate_id
from canteen.enums.wallet_transaction_type import WalletTransactionType

if TYPE_CHECKING:
    from canteen.models.user.user import User


class WalletTransaction(SQLModel, table=True):
    __tablename__ = "wallet_transactions"

    id: str = Field(default_factory=generate_id, primary_key=True)

    user_id: str = Field(foreign_key="users.id", index=True)
    user: Optional["User"] = Relationship(back_populates="wallet_transactions")

    # Signed: debits are stored negative.
    amount: float
    type: WalletTransactionType = Field(sa_column=Column(Enum(WalletTransactionType), nullable=False))
    description: Optional[str] = None

    razorpay_payment_id: Optional[str] = Field(default=None, unique=True)
    razorpay_order_id: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
