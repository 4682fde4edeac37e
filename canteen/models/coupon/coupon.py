from datetime import datetime, timezone
from typing import Optional
from sqlmodel import Field, SQLModel

from canteen.core.utils.datetime_utils import as_utc
from canteen.core.utils.identifiers import generate_id


class Coupon(SQLModel, table=True):
    __tablename__ = "coupons"

    id: str = Field(default_factory=generate_id, primary_key=True)
    code: str = Field(index=True, unique=True, max_length=50)
    amount: float = Field(gt=0)
    description: Optional[str] = Field(default=None)
    valid_until: Optional[datetime] = Field(default=None)
    is_active: bool = Field(default=True)

    created_by: Optional[str] = Field(default=None, foreign_key="users.id")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def valid_until_utc(self) -> Optional[datetime]:
        return as_utc(self.valid_until)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        valid_until = self.valid_until_utc
        return valid_until is not None and valid_until < (now or datetime.now(timezone.utc))
