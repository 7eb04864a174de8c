from __future__ import annotations

import logging

from fastapi import HTTPException, status

from hanumant.core.clock import LibraryClock
from hanumant.models.chat import ChatMessage
from hanumant.models.member import Member
from hanumant.models.setting import Setting
from hanumant.services.realtime import GROUP_ROOM, path_for_room
from hanumant.services.store import LibraryStore

logger = logging.getLogger(__name__)

CHAT_ENABLED_KEY = "chatEnabled"
MESSAGE_TYPES = ("text", "emoji", "gif")


def private_room_id(member_a: int, member_b: int) -> str:
    """Room id shared by two members regardless of who opens it."""
    return "_".join(sorted((str(member_a), str(member_b))))


def room_members(room_id: str) -> set[str]:
    return set(room_id.split("_"))


def chat_enabled(store: LibraryStore) -> bool:
    setting = store.db.query(Setting).filter(Setting.key == CHAT_ENABLED_KEY).first()
    if setting is None or setting.value is None:
        return True
    return setting.value != "false"


def set_chat_enabled(store: LibraryStore, enabled: bool) -> bool:
    setting = store.db.query(Setting).filter(Setting.key == CHAT_ENABLED_KEY).first()
    value = "true" if enabled else "false"
    if setting:
        setting.value = value
    else:
        store.add(Setting(key=CHAT_ENABLED_KEY, value=value))
    store.commit("settings")
    logger.info("chat_toggled", extra={"enabled": enabled})
    return enabled


class ChatRelay:
    def __init__(self, store: LibraryStore, clock: LibraryClock) -> None:
        self.store = store
        self.clock = clock

    def _post(self, room_id: str, sender: Member, content: str, type: str) -> ChatMessage:
        if not chat_enabled(self.store):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Chat is disabled")
        content = (content or "").strip()
        if not content:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message cannot be empty")
        if type not in MESSAGE_TYPES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unsupported message type")
        message = ChatMessage(
            room_id=room_id,
            sender_id=sender.id,
            sender_name=sender.name,
            content=content,
            type=type,
            timestamp=self.clock.now(),
        )
        self.store.add(message)
        self.store.commit(path_for_room(room_id))
        return message

    def send_group_message(self, sender: Member, content: str, type: str = "text") -> ChatMessage:
        return self._post(GROUP_ROOM, sender, content, type)

    def send_private_message(self, sender: Member, recipient: Member, content: str, type: str = "text") -> ChatMessage:
        if recipient.id == sender.id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot message yourself")
        return self._post(private_room_id(sender.id, recipient.id), sender, content, type)

    def room_messages(self, room_id: str) -> list[ChatMessage]:
        return (
            self.store.db.query(ChatMessage)
            .filter(ChatMessage.room_id == room_id)
            .order_by(ChatMessage.timestamp.asc(), ChatMessage.id.asc())
            .all()
        )
