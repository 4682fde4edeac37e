from datetime import datetime, timezone
from typing import Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship, SQLModel
from sqlalchemy import Column, Enum

from canteen.core.utils.identifiers import generate_id
from canteen.enums.notification_type import NotificationType

if TYPE_CHECKING:
    from canteen.models.user.user import User


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"

    id: str = Field(default_factory=generate_id, primary_key=True)

    user_id: str = Field(foreign_key="users.id", index=True)
    user: Optional["User"] = Relationship(back_populates="notifications")

    type: NotificationType = Field(default=NotificationType.SYSTEM, sa_column=Column(Enum(NotificationType), nullable=False))
    title: str
    message: str
    is_read: bool = Field(default=False)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
