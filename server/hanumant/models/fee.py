from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Enum, Integer, String, UniqueConstraint

from hanumant.core.db import Base

FeeStatusColumn = Enum("pending", "overdue", "paid", name="fee_status")


class FeeRecord(Base):
    """One 30-day billing period of a member (a "due")."""

    __tablename__ = "dues"
    __table_args__ = (
        UniqueConstraint("member_id", "period_start", name="uq_dues_member_period_start"),
    )

    id = Column(Integer, primary_key=True)
    member_id = Column(Integer, nullable=False, index=True)
    member_name = Column(String(150), nullable=False)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    amount = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    status = Column(FeeStatusColumn, nullable=False, default="pending")
    paid_date = Column(DateTime(timezone=True), nullable=True)
    receipt_number = Column(String(40), unique=True, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
