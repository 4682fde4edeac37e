from fastapi import APIRouter, Depends
from sqlmodel import Session, delete, select, update

from canteen.auth.credentials import Principal
from canteen.auth.gate import require_user, reject_unsupported_methods
from canteen.database.connection import get_session
from canteen.models.notification.notification import Notification
from canteen.schemas.notification.notification import NotificationRead

db_session = get_session

NOTIFICATION_LIMIT = 50


class NotificationRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(prefix="/api/user/notifications", tags=["Notifications"], *args, **kwargs)
        self.add_api_route("", self.list_notifications, methods=["GET"])
        self.add_api_route("", self.mark_all_read, methods=["PUT"])
        self.add_api_route("/{notification_id}", self.mark_read, methods=["PUT"])
        self.add_api_route("/{notification_id}", self.delete_notification, methods=["DELETE"])
        reject_unsupported_methods(self, require_user)

    def list_notifications(self, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        notifications = session.exec(
            select(Notification)
            .where(Notification.user_id == current_user.user_id)
            .order_by(Notification.created_at.desc())
            .limit(NOTIFICATION_LIMIT)
        ).all()
        return {"success": True, "notifications": [NotificationRead.model_validate(n) for n in notifications]}

    def mark_all_read(self, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        session.exec(
            update(Notification)
            .where(Notification.user_id == current_user.user_id, Notification.is_read == False)
            .values(is_read=True)
        )
        session.commit()
        return {"success": True, "message": "All notifications marked as read"}

    def mark_read(self, notification_id: str, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        session.exec(
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == current_user.user_id)
            .values(is_read=True)
        )
        session.commit()
        return {"success": True, "message": "Notification marked as read"}

    def delete_notification(self, notification_id: str, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        session.exec(
            delete(Notification).where(Notification.id == notification_id, Notification.user_id == current_user.user_id)
        )
        session.commit()
        return {"success": True, "message": "Notification deleted"}
