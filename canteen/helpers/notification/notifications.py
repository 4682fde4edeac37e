import logging
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from canteen.enums.notification_type import NotificationType
from canteen.models.notification.notification import Notification


def notify(session: Session, user_id: str, type: NotificationType, title: str, message: str) -> bool:
    """Writes one notification in its own commit.

    Whatever the caller already committed stays committed: a failure here is
    logged and rolled back on its own.
    """
    return notify_many(session, [user_id], type, title, message)


def notify_many(session: Session, user_ids: Iterable[str], type: NotificationType, title: str, message: str) -> bool:
    user_ids = list(user_ids)
    try:
        for user_id in user_ids:
            session.add(Notification(user_id=user_id, type=type, title=title, message=message, is_read=False))
        session.commit()
        return True
    except SQLAlchemyError as e:
        session.rollback()
        logging.error(f"NOTIFICATION >>> Failed to notify {len(user_ids)} user(s) '{title}': {e}")
        return False
