from __future__ import annotations

import logging
from datetime import datetime

from hanumant.core.clock import LibraryClock
from hanumant.models.activity import Activity
from hanumant.services.store import LibraryStore

logger = logging.getLogger(__name__)

ACTIVITY_TYPES = ("entry", "exit", "payment", "member_added", "member_removed")


class ActivityLog:
    """Append-only audit trail of attendance, payments and membership changes.

    Entries are staged on the caller's unit of work and become visible when
    the caller commits; nothing here ever updates or deletes a row.
    """

    def __init__(self, store: LibraryStore, clock: LibraryClock) -> None:
        self.store = store
        self.clock = clock

    def append(
        self,
        type: str,
        *,
        member_id: int,
        member_name: str,
        details: str,
        timestamp: datetime | None = None,
    ) -> Activity:
        if type not in ACTIVITY_TYPES:
            raise ValueError(f"Unknown activity type: {type}")
        activity = Activity(
            type=type,
            member_id=member_id,
            member_name=member_name,
            timestamp=timestamp or self.clock.now(),
            details=details,
        )
        self.store.add(activity)
        logger.debug("activity_appended", extra={"type": type, "member_id": member_id})
        return activity

    def recent(self, limit: int) -> list[Activity]:
        return (
            self.store.db.query(Activity)
            .order_by(Activity.timestamp.desc(), Activity.id.desc())
            .limit(limit)
            .all()
        )
