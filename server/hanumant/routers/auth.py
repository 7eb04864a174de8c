import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from hanumant.auth.deps import get_current_identity, get_password_reset_service, require_admin
from hanumant.auth.identity import Identity
from hanumant.auth.security import create_access_token, verify_password
from hanumant.core.db import get_db
from hanumant.models.admin import Admin
from hanumant.models.member import Member
from hanumant.schemas.auth import (
    LoginRequest,
    PasswordResetComplete,
    PasswordResetIssued,
    PasswordResetRequest,
    TokenResponse,
    WhoAmIResponse,
)
from hanumant.services.password_reset import PasswordResetService

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    email = payload.email.lower()
    account = db.query(Admin).filter(func.lower(Admin.email) == email).first()
    role = "admin"
    if account is None:
        account = db.query(Member).filter(func.lower(Member.email) == email).first()
        role = "user"
    if account is None or not verify_password(payload.password, account.hashed_password):
        logger.info("login_failed", extra={"email": email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")
    token = create_access_token(account.uid, role)
    logger.info("login_succeeded", extra={"uid": account.uid, "role": role})
    return TokenResponse(access_token=token, role=role)


@router.get("/whoami", response_model=WhoAmIResponse)
def whoami(identity: Identity = Depends(get_current_identity)) -> WhoAmIResponse:
    return WhoAmIResponse(
        uid=identity.uid,
        role=identity.role,
        display_name=identity.display_name,
        member_id=identity.member.id if identity.member else None,
    )


@router.post("/password-reset", response_model=PasswordResetIssued, status_code=status.HTTP_201_CREATED)
def send_password_reset(
    payload: PasswordResetRequest,
    db: Session = Depends(get_db),
    service: PasswordResetService = Depends(get_password_reset_service),
    admin: Identity = Depends(require_admin),
) -> PasswordResetIssued:
    member = db.get(Member, payload.member_id)
    if member is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    token, expires_at, email_sent = service.request_reset(member, requested_by=admin)
    return PasswordResetIssued(token=token, expires_at=expires_at, email_sent=email_sent)


@router.post("/password-reset/{token}", status_code=status.HTTP_204_NO_CONTENT)
def complete_password_reset(
    token: str,
    payload: PasswordResetComplete,
    service: PasswordResetService = Depends(get_password_reset_service),
) -> None:
    service.complete_reset(token, payload.password)
