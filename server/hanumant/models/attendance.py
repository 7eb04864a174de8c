from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Integer, String, Time, UniqueConstraint

from hanumant.core.db import Base


class AttendanceRecord(Base):
    """One presence session. exit_time and duration are set together, once."""

    __tablename__ = "attendance"
    __table_args__ = (UniqueConstraint("open_slot", name="uq_attendance_open_slot"),)

    id = Column(Integer, primary_key=True)
    # Not a foreign key: rows outlive the member they reference.
    member_id = Column(Integer, nullable=False, index=True)
    member_name = Column(String(150), nullable=False)
    date = Column(Date, nullable=False, index=True)
    entry_time = Column(Time, nullable=False)
    exit_time = Column(Time, nullable=True)
    duration = Column(Integer, nullable=True)
    # "<member_id>:<date>" while the session is open under the one-open-session
    # policy, NULL otherwise; the unique key lets only one check-in win.
    open_slot = Column(String(40), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    @property
    def is_open(self) -> bool:
        return self.exit_time is None
