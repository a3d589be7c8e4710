import logging
from datetime import datetime
from typing import List, Optional, Dict, Any

from sqlalchemy import select

from database.models import Notification
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATION_LIST_LIMIT = 50


class NotificationRepository(BaseRepository):
    def create_notification(
        self,
        user_id: str,
        notification_type: str,
        recipient: str,
        message: str,
        subject: Optional[str] = None,
        tender_id: Optional[int] = None,
        event_data: Optional[Dict[str, Any]] = None
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            tender_id=tender_id,
            type=notification_type,
            recipient=recipient,
            subject=subject,
            message=message,
            status='pending',
            event_data=event_data or {}
        )
        self.db.add(notification)
        self.db.flush()  # Generate ID
        return notification

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        stmt = select(Notification).where(Notification.id == notification_id)
        return self._one_or_none(stmt)

    def update_status(
        self,
        notification_id: int,
        status: str,
        sent_at: Optional[datetime] = None,
        error_message: Optional[str] = None
    ) -> Optional[Notification]:
        notification = self.get_by_id(notification_id)
        if notification is None:
            logger.warning(f"Notification {notification_id} not found, cannot set status {status}")
            return None

        notification.status = status
        if sent_at is not None:
            notification.sent_at = sent_at
        if error_message is not None:
            notification.error_message = error_message
        return notification

    def get_user_notifications(
        self,
        user_id: str,
        limit: int = DEFAULT_NOTIFICATION_LIST_LIMIT
    ) -> List[Notification]:
        stmt = select(Notification).where(
            Notification.user_id == user_id
        ).order_by(Notification.created_at.desc()).limit(limit)
        return self.db.execute(stmt).scalars().all()
