from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from hanumant.services.realtime import SnapshotHub

logger = logging.getLogger(__name__)


class LibraryStore:
    """Store client handed to every domain component.

    Wraps one database session and the snapshot hub: writes are staged on
    the session, and ``commit`` makes them visible to subscribers of the
    touched paths only once they are durable.
    """

    def __init__(self, db: Session, hub: SnapshotHub | None = None) -> None:
        self.db = db
        self.hub = hub

    def add(self, record) -> None:
        self.db.add(record)

    def delete(self, record) -> None:
        self.db.delete(record)

    def flush(self) -> None:
        self.db.flush()

    def commit(self, *paths: str) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("store_commit_failed", extra={"paths": list(paths)})
            raise
        if self.hub is not None and paths:
            self.hub.publish(*paths)
