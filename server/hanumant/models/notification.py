from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from hanumant.core.db import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    # "all" for a broadcast, otherwise the member id as a string
    recipient_id = Column(String(32), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    reads = relationship("NotificationRead", back_populates="notification", cascade="all, delete-orphan")

    def is_read_by(self, member_id: int) -> bool:
        return any(read.member_id == member_id for read in self.reads)


class NotificationRead(Base):
    __tablename__ = "notification_reads"

    notification_id = Column(Integer, ForeignKey("notifications.id", ondelete="CASCADE"), primary_key=True)
    member_id = Column(Integer, primary_key=True)
    read_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    notification = relationship("Notification", back_populates="reads")
