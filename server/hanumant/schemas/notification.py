from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class NotificationCreate(BaseModel):
    title: str = Field(..., max_length=200)
    message: str = Field(..., max_length=2000)
    recipient_id: str = Field("all", min_length=1, max_length=32)


class NotificationOut(BaseModel):
    id: int
    title: str
    message: str
    recipient_id: str
    created_at: datetime
    read: bool = False


class UnreadCount(BaseModel):
    unread: int


class MarkedRead(BaseModel):
    marked: int
