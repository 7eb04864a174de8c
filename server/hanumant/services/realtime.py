"""Push-based change fan-out for store collections.

Subscribers register interest in a collection path (``dues``,
``chat/group``, ``chat/private/3_7`` ...) and receive a notice every time a
unit of work touching that path commits. Notices carry only the path; the
subscriber reloads the full collection snapshot, so no incremental ordering
is ever assumed.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from hanumant.models.activity import Activity
from hanumant.models.admin import Admin
from hanumant.models.attendance import AttendanceRecord
from hanumant.models.chat import ChatMessage
from hanumant.models.fee import FeeRecord
from hanumant.models.member import Member
from hanumant.models.notification import Notification
from hanumant.models.setting import Setting

logger = logging.getLogger(__name__)

GROUP_ROOM = "group"
PRIVATE_ROOM_PREFIX = "chat/private/"

COLLECTIONS = (
    "members",
    "attendance",
    "dues",
    "activities",
    "chat/group",
    "notifications",
    "settings",
    "admins",
)


def is_known_path(path: str) -> bool:
    if path in COLLECTIONS:
        return True
    return path.startswith(PRIVATE_ROOM_PREFIX) and len(path) > len(PRIVATE_ROOM_PREFIX)


def room_id_for_path(path: str) -> str:
    if path == "chat/group":
        return GROUP_ROOM
    if path.startswith(PRIVATE_ROOM_PREFIX):
        return path[len(PRIVATE_ROOM_PREFIX):]
    raise ValueError(f"Not a chat path: {path}")


def path_for_room(room_id: str) -> str:
    if room_id == GROUP_ROOM:
        return "chat/group"
    return f"{PRIVATE_ROOM_PREFIX}{room_id}"


@dataclass
class Subscription:
    path: str
    queue: asyncio.Queue
    loop: asyncio.AbstractEventLoop
    id: int = field(default=0)


class SnapshotHub:
    """Thread-safe registry of per-path subscribers.

    Request handlers run in worker threads, subscribers live on the event
    loop; ``publish`` hands notices over with ``call_soon_threadsafe``.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, dict[int, Subscription]] = {}
        self._lock = threading.Lock()
        self._next_id = 1

    def subscribe(self, path: str, loop: asyncio.AbstractEventLoop | None = None) -> Subscription:
        loop = loop or asyncio.get_running_loop()
        with self._lock:
            subscription = Subscription(path=path, queue=asyncio.Queue(), loop=loop, id=self._next_id)
            self._next_id += 1
            self._subscriptions.setdefault(path, {})[subscription.id] = subscription
        logger.debug("realtime_subscribed", extra={"path": path, "subscription_id": subscription.id})
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            listeners = self._subscriptions.get(subscription.path)
            if not listeners:
                return
            listeners.pop(subscription.id, None)
            if not listeners:
                self._subscriptions.pop(subscription.path, None)

    def subscriber_count(self, path: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(path, {}))

    def publish(self, *paths: str) -> None:
        with self._lock:
            targets = [
                subscription
                for path in dict.fromkeys(paths)
                for subscription in self._subscriptions.get(path, {}).values()
            ]
        for subscription in targets:
            try:
                subscription.loop.call_soon_threadsafe(subscription.queue.put_nowait, subscription.path)
            except RuntimeError:
                # Loop already closed; the socket handler will unsubscribe on its way out.
                logger.debug("realtime_publish_dropped", extra={"path": subscription.path})


def _serialize_value(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def _row(record: Any, fields: tuple[str, ...]) -> dict[str, Any]:
    return {name: _serialize_value(getattr(record, name)) for name in fields}


MEMBER_FIELDS = (
    "id", "name", "email", "phone", "address", "join_date", "seat_number", "locker_number",
    "shift", "monthly_fee", "status", "profile_pic", "created_at",
)
ATTENDANCE_FIELDS = ("id", "member_id", "member_name", "date", "entry_time", "exit_time", "duration")
DUE_FIELDS = (
    "id", "member_id", "member_name", "period_start", "period_end", "amount", "due_date",
    "status", "paid_date", "receipt_number", "created_at",
)
ACTIVITY_FIELDS = ("id", "type", "member_id", "member_name", "timestamp", "details")
CHAT_FIELDS = ("id", "room_id", "sender_id", "sender_name", "content", "type", "timestamp")
ADMIN_FIELDS = ("id", "uid", "email", "full_name")


def _notification_row(notification: Notification) -> dict[str, Any]:
    data = _row(notification, ("id", "title", "message", "recipient_id", "created_at"))
    data["read_by"] = {str(read.member_id): True for read in notification.reads}
    return data


def load_snapshot(db: Session, path: str, *, member_id: int | None = None) -> list[dict[str, Any]] | dict[str, Any]:
    """Full ordered snapshot of ``path``.

    ``member_id`` narrows member-owned collections to one member's rows.
    """
    if path == "members":
        query = db.query(Member).order_by(Member.name.asc(), Member.id.asc())
        if member_id is not None:
            query = query.filter(Member.id == member_id)
        return [_row(member, MEMBER_FIELDS) for member in query.all()]
    if path == "attendance":
        query = db.query(AttendanceRecord)
        if member_id is not None:
            query = query.filter(AttendanceRecord.member_id == member_id)
        query = query.order_by(
            AttendanceRecord.date.desc(), AttendanceRecord.entry_time.desc(), AttendanceRecord.id.desc()
        )
        return [_row(record, ATTENDANCE_FIELDS) for record in query.all()]
    if path == "dues":
        query = db.query(FeeRecord)
        if member_id is not None:
            query = query.filter(FeeRecord.member_id == member_id)
        query = query.order_by(
            func.coalesce(FeeRecord.paid_date, FeeRecord.created_at).desc(), FeeRecord.id.desc()
        )
        return [_row(record, DUE_FIELDS) for record in query.all()]
    if path == "activities":
        query = db.query(Activity).order_by(Activity.timestamp.desc(), Activity.id.desc())
        return [_row(activity, ACTIVITY_FIELDS) for activity in query.all()]
    if path == "notifications":
        query = db.query(Notification).options(selectinload(Notification.reads))
        if member_id is not None:
            query = query.filter(Notification.recipient_id.in_(["all", str(member_id)]))
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc())
        return [_notification_row(item) for item in query.all()]
    if path == "settings":
        return {setting.key: setting.value for setting in db.query(Setting).all()}
    if path == "admins":
        return [_row(admin, ADMIN_FIELDS) for admin in db.query(Admin).order_by(Admin.id.asc()).all()]
    if path == "chat/group" or path.startswith(PRIVATE_ROOM_PREFIX):
        room_id = room_id_for_path(path)
        query = (
            db.query(ChatMessage)
            .filter(ChatMessage.room_id == room_id)
            .order_by(ChatMessage.timestamp.asc(), ChatMessage.id.asc())
        )
        return [_row(message, CHAT_FIELDS) for message in query.all()]
    raise ValueError(f"Unknown store path: {path}")
