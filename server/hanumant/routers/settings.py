from fastapi import APIRouter, Depends

from hanumant.auth.deps import get_current_identity, get_store, require_admin
from hanumant.auth.identity import Identity
from hanumant.schemas.chat import ChatSettings
from hanumant.services.chat import chat_enabled, set_chat_enabled
from hanumant.services.store import LibraryStore

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/chat", response_model=ChatSettings)
def read_chat_settings(
    store: LibraryStore = Depends(get_store),
    _: Identity = Depends(get_current_identity),
) -> ChatSettings:
    return ChatSettings(chat_enabled=chat_enabled(store))


@router.put("/chat", response_model=ChatSettings)
def update_chat_settings(
    payload: ChatSettings,
    store: LibraryStore = Depends(get_store),
    _: Identity = Depends(require_admin),
) -> ChatSettings:
    return ChatSettings(chat_enabled=set_chat_enabled(store, payload.chat_enabled))
