from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, Integer, String

from hanumant.core.db import Base

ActivityType = Enum("entry", "exit", "payment", "member_added", "member_removed", name="activity_type")


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True)
    type = Column(ActivityType, nullable=False)
    member_id = Column(Integer, nullable=False, index=True)
    member_name = Column(String(150), nullable=False)
    timestamp = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False, index=True)
    details = Column(String(500), nullable=True)
