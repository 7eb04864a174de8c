from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from hanumant.auth.deps import get_chat_relay, get_current_identity, get_member_registry, require_member
from hanumant.auth.identity import Identity
from hanumant.core.db import get_db
from hanumant.models.member import Member
from hanumant.schemas.chat import ChatMessageCreate, ChatMessageOut
from hanumant.schemas.member import ChatContact
from hanumant.services.chat import ChatRelay, private_room_id
from hanumant.services.members import MemberRegistry
from hanumant.services.realtime import GROUP_ROOM

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("/contacts", response_model=list[ChatContact])
def list_contacts(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_member),
) -> list[ChatContact]:
    me = identity.member
    others = db.query(Member).filter(Member.id != me.id).order_by(Member.name.asc()).all()
    return [
        ChatContact(id=other.id, name=other.name, profile_pic=other.profile_pic, room_id=private_room_id(me.id, other.id))
        for other in others
    ]


@router.get("/group", response_model=list[ChatMessageOut])
def group_messages(
    relay: ChatRelay = Depends(get_chat_relay),
    _: Identity = Depends(get_current_identity),
) -> list[ChatMessageOut]:
    return relay.room_messages(GROUP_ROOM)


@router.post("/group", response_model=ChatMessageOut, status_code=status.HTTP_201_CREATED)
def post_group_message(
    payload: ChatMessageCreate,
    relay: ChatRelay = Depends(get_chat_relay),
    identity: Identity = Depends(require_member),
) -> ChatMessageOut:
    return relay.send_group_message(identity.member, payload.content, payload.type)


@router.get("/private/{member_id}", response_model=list[ChatMessageOut])
def private_messages(
    member_id: int,
    relay: ChatRelay = Depends(get_chat_relay),
    registry: MemberRegistry = Depends(get_member_registry),
    identity: Identity = Depends(require_member),
) -> list[ChatMessageOut]:
    other = registry.get_member(member_id)
    return relay.room_messages(private_room_id(identity.member.id, other.id))


@router.post("/private/{member_id}", response_model=ChatMessageOut, status_code=status.HTTP_201_CREATED)
def post_private_message(
    member_id: int,
    payload: ChatMessageCreate,
    relay: ChatRelay = Depends(get_chat_relay),
    registry: MemberRegistry = Depends(get_member_registry),
    identity: Identity = Depends(require_member),
) -> ChatMessageOut:
    recipient = registry.get_member(member_id)
    return relay.send_private_message(identity.member, recipient, payload.content, payload.type)
