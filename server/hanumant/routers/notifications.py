from fastapi import APIRouter, Depends, HTTPException, status

from hanumant.auth.deps import get_current_identity, get_member_registry, get_notification_relay, require_admin, require_member
from hanumant.auth.identity import Identity
from hanumant.models.notification import Notification
from hanumant.schemas.notification import MarkedRead, NotificationCreate, NotificationOut, UnreadCount
from hanumant.services.members import MemberRegistry
from hanumant.services.notifications import BROADCAST, NotificationRelay

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _to_out(notification: Notification, member_id: int | None) -> NotificationOut:
    return NotificationOut(
        id=notification.id,
        title=notification.title,
        message=notification.message,
        recipient_id=notification.recipient_id,
        created_at=notification.created_at,
        read=member_id is not None and notification.is_read_by(member_id),
    )


@router.post("", response_model=NotificationOut, status_code=status.HTTP_201_CREATED)
def send_notification(
    payload: NotificationCreate,
    relay: NotificationRelay = Depends(get_notification_relay),
    registry: MemberRegistry = Depends(get_member_registry),
    _: Identity = Depends(require_admin),
) -> NotificationOut:
    recipient_id = payload.recipient_id.strip()
    if recipient_id != BROADCAST:
        if not recipient_id.isdigit():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Recipient must be 'all' or a member id")
        registry.get_member(int(recipient_id))
    notification = relay.send(title=payload.title, message=payload.message, recipient_id=recipient_id)
    return _to_out(notification, None)


@router.get("", response_model=list[NotificationOut])
def list_notifications(
    relay: NotificationRelay = Depends(get_notification_relay),
    identity: Identity = Depends(get_current_identity),
) -> list[NotificationOut]:
    if identity.is_admin:
        return [_to_out(item, None) for item in relay.all()]
    if identity.member is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Member account required")
    member_id = identity.member.id
    return [_to_out(item, member_id) for item in relay.for_member(member_id)]


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(
    relay: NotificationRelay = Depends(get_notification_relay),
    identity: Identity = Depends(require_member),
) -> UnreadCount:
    return UnreadCount(unread=relay.unread_count(identity.member.id))


@router.post("/read-all", response_model=MarkedRead)
def mark_all_read(
    relay: NotificationRelay = Depends(get_notification_relay),
    identity: Identity = Depends(require_member),
) -> MarkedRead:
    return MarkedRead(marked=relay.mark_all_read(identity.member.id))


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_read(
    notification_id: int,
    relay: NotificationRelay = Depends(get_notification_relay),
    identity: Identity = Depends(require_member),
) -> NotificationOut:
    member_id = identity.member.id
    return _to_out(relay.mark_read(notification_id, member_id), member_id)
