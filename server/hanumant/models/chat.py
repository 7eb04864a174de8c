from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, Integer, String, Text

from hanumant.core.db import Base

ChatMessageType = Enum("text", "emoji", "gif", name="chat_message_type")


class ChatMessage(Base):
    """A message in ``chat/group`` or ``chat/private/{room_id}``."""

    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True)
    room_id = Column(String(64), nullable=False, index=True)
    sender_id = Column(Integer, nullable=False)
    sender_name = Column(String(150), nullable=False)
    content = Column(Text, nullable=False)
    type = Column(ChatMessageType, nullable=False, default="text")
    timestamp = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False, index=True)
