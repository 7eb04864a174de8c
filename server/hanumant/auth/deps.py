from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from hanumant.auth.identity import Identity, resolve_identity
from hanumant.auth.security import decode_access_token
from hanumant.core.clock import LibraryClock, get_clock
from hanumant.core.config import settings
from hanumant.core.db import get_db
from hanumant.services.activity_log import ActivityLog
from hanumant.services.attendance import AttendanceTracker
from hanumant.services.chat import ChatRelay
from hanumant.services.email_sender import EmailSender, get_email_sender
from hanumant.services.fee_cycle import FeeCycleEngine
from hanumant.services.members import MemberRegistry
from hanumant.services.notifications import NotificationRelay
from hanumant.services.password_reset import PasswordResetService
from hanumant.services.realtime import SnapshotHub
from hanumant.services.store import LibraryStore

bearer_scheme = HTTPBearer(auto_error=False)


def identity_from_token(db: Session, token: str) -> Identity:
    try:
        payload = decode_access_token(token)
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")

    identity = resolve_identity(db, str(subject))
    if identity is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is not registered with the library")
    return identity


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Identity:
    if not credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return identity_from_token(db, credentials.credentials)


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return identity


def require_member(identity: Identity = Depends(get_current_identity)) -> Identity:
    if identity.role != "user" or identity.member is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Member account required")
    return identity


def get_hub(request: Request) -> SnapshotHub:
    return request.app.state.hub


def get_store(db: Session = Depends(get_db), hub: SnapshotHub = Depends(get_hub)) -> LibraryStore:
    return LibraryStore(db, hub)


def get_activity_log(
    store: LibraryStore = Depends(get_store),
    clock: LibraryClock = Depends(get_clock),
) -> ActivityLog:
    return ActivityLog(store, clock)


def get_attendance_tracker(
    store: LibraryStore = Depends(get_store),
    clock: LibraryClock = Depends(get_clock),
    activity_log: ActivityLog = Depends(get_activity_log),
) -> AttendanceTracker:
    return AttendanceTracker(store, clock, activity_log, allow_duplicate_entry=settings.ALLOW_DUPLICATE_ENTRY)


def get_fee_engine(
    store: LibraryStore = Depends(get_store),
    clock: LibraryClock = Depends(get_clock),
    activity_log: ActivityLog = Depends(get_activity_log),
) -> FeeCycleEngine:
    return FeeCycleEngine(store, clock, activity_log, cycle_days=settings.FEE_CYCLE_DAYS)


def get_chat_relay(
    store: LibraryStore = Depends(get_store),
    clock: LibraryClock = Depends(get_clock),
) -> ChatRelay:
    return ChatRelay(store, clock)


def get_notification_relay(
    store: LibraryStore = Depends(get_store),
    clock: LibraryClock = Depends(get_clock),
) -> NotificationRelay:
    return NotificationRelay(store, clock)


def get_member_registry(
    store: LibraryStore = Depends(get_store),
    clock: LibraryClock = Depends(get_clock),
    activity_log: ActivityLog = Depends(get_activity_log),
    fee_engine: FeeCycleEngine = Depends(get_fee_engine),
) -> MemberRegistry:
    return MemberRegistry(store, clock, activity_log, fee_engine)


def get_password_reset_service(
    store: LibraryStore = Depends(get_store),
    clock: LibraryClock = Depends(get_clock),
    sender: EmailSender = Depends(get_email_sender),
) -> PasswordResetService:
    return PasswordResetService(store, clock, sender)
