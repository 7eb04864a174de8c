from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Enum, Integer, String, Text

from hanumant.core.db import Base

MemberStatus = Enum("active", "inactive", name="member_status")


class Member(Base):
    __tablename__ = "members"

    id = Column(Integer, primary_key=True)
    uid = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(150), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(25), nullable=False)
    address = Column(String(255), nullable=True)
    join_date = Column(Date, nullable=False)
    seat_number = Column(String(20), nullable=True)
    locker_number = Column(String(20), nullable=True)
    shift = Column(String(30), nullable=True)
    monthly_fee = Column(Integer, nullable=False)
    status = Column(MemberStatus, nullable=False, default="active")
    profile_pic = Column(Text, nullable=True)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @property
    def is_active(self) -> bool:
        return self.status == "active"
