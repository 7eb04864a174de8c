from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import HTTPException, status
from sqlalchemy.orm import selectinload

from hanumant.core.clock import LibraryClock
from hanumant.models.notification import Notification, NotificationRead
from hanumant.services.store import LibraryStore

if TYPE_CHECKING:
    from hanumant.models.fee import FeeRecord

logger = logging.getLogger(__name__)

BROADCAST = "all"


def notify_fee_overdue(record: "FeeRecord") -> None:
    logger.warning(
        "fee_overdue",
        extra={
            "due_id": record.id,
            "member_id": record.member_id,
            "due_date": record.due_date.isoformat(),
            "amount": record.amount,
        },
    )


class NotificationRelay:
    """Staff-to-member notices with per-member read tracking."""

    def __init__(self, store: LibraryStore, clock: LibraryClock) -> None:
        self.store = store
        self.clock = clock

    def send(self, *, title: str, message: str, recipient_id: str) -> Notification:
        title = title.strip()
        message = message.strip()
        if not title or not message:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title and message are required")
        notification = Notification(
            title=title,
            message=message,
            recipient_id=recipient_id,
            created_at=self.clock.now(),
        )
        self.store.add(notification)
        self.store.commit("notifications")
        logger.info("notification_sent", extra={"notification_id": notification.id, "recipient_id": recipient_id})
        return notification

    def for_member(self, member_id: int) -> list[Notification]:
        return (
            self.store.db.query(Notification)
            .options(selectinload(Notification.reads))
            .filter(Notification.recipient_id.in_([BROADCAST, str(member_id)]))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )

    def all(self) -> list[Notification]:
        return (
            self.store.db.query(Notification)
            .options(selectinload(Notification.reads))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )

    def unread_count(self, member_id: int) -> int:
        return sum(1 for item in self.for_member(member_id) if not item.is_read_by(member_id))

    def mark_read(self, notification_id: int, member_id: int) -> Notification:
        notification = self.store.db.get(Notification, notification_id)
        if notification is None or notification.recipient_id not in (BROADCAST, str(member_id)):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
        if not notification.is_read_by(member_id):
            notification.reads.append(NotificationRead(member_id=member_id, read_at=self.clock.now()))
            self.store.commit("notifications")
        return notification

    def mark_all_read(self, member_id: int) -> int:
        marked = 0
        for notification in self.for_member(member_id):
            if notification.is_read_by(member_id):
                continue
            notification.reads.append(NotificationRead(member_id=member_id, read_at=self.clock.now()))
            marked += 1
        if marked:
            self.store.commit("notifications")
        return marked
