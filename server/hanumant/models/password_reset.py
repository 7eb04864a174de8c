from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from hanumant.core.db import Base


class PasswordResetToken(Base):
    __tablename__ = "password_reset_tokens"

    id = Column(Integer, primary_key=True)
    uid = Column(String(64), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    token_hash = Column(String(64), unique=True, nullable=False)
    requested_by_uid = Column(String(64), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
