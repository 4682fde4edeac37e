from datetime import datetime
from pydantic import BaseModel

from canteen.enums.notification_type import NotificationType


class NotificationRead(BaseModel):
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True
