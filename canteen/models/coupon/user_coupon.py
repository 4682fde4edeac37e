from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from canteen.core.utils.identifiers import generate_id
from canteen.models.coupon.coupon import Coupon


class UserCoupon(SQLModel, table=True):
    __tablename__ = "user_coupons"
    __table_args__ = (UniqueConstraint("user_id", "coupon_id", name="uq_user_coupons_user_coupon"),)

    id: str = Field(default_factory=generate_id, primary_key=True)

    user_id: str = Field(foreign_key="users.id", index=True)
    coupon_id: str = Field(foreign_key="coupons.id", index=True)
    coupon: Optional[Coupon] = Relationship()

    is_redeemed: bool = Field(default=False)
    redeemed_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
