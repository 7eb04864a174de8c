from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

MessageTypeLiteral = Literal["text", "emoji", "gif"]


class ChatMessageCreate(BaseModel):
    content: str = Field(..., max_length=2000)
    type: MessageTypeLiteral = "text"


class ChatMessageOut(BaseModel):
    id: int
    room_id: str
    sender_id: int
    sender_name: str
    content: str
    type: MessageTypeLiteral
    timestamp: datetime

    class Config:
        from_attributes = True


class ChatSettings(BaseModel):
    chat_enabled: bool
