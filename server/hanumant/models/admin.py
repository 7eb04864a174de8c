from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from hanumant.core.db import Base


class Admin(Base):
    """Admin registry; presence of a uid here grants the admin role."""

    __tablename__ = "admins"

    id = Column(Integer, primary_key=True)
    uid = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
