from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import datetime, timedelta

from fastapi import HTTPException, status

from hanumant.auth.identity import Identity
from hanumant.auth.security import hash_password
from hanumant.core.clock import LibraryClock
from hanumant.core.config import settings
from hanumant.models.member import Member
from hanumant.models.password_reset import PasswordResetToken
from hanumant.services.email_sender import EmailSender
from hanumant.services.email_templates import render_password_reset_email
from hanumant.services.members import validate_password
from hanumant.services.store import LibraryStore

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _as_aware(value: datetime, clock: LibraryClock) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=clock.tz)
    return value


class PasswordResetService:
    """One-time reset links replacing any stored copy of member passwords."""

    def __init__(self, store: LibraryStore, clock: LibraryClock, sender: EmailSender) -> None:
        self.store = store
        self.clock = clock
        self.sender = sender

    def request_reset(self, member: Member, requested_by: Identity | None = None) -> tuple[str, datetime, bool]:
        raw_token = secrets.token_urlsafe(32)
        now = self.clock.now()
        expires_at = now + timedelta(hours=settings.PASSWORD_RESET_EXPIRY_HOURS)
        self.store.add(
            PasswordResetToken(
                uid=member.uid,
                email=member.email,
                token_hash=hash_token(raw_token),
                requested_by_uid=requested_by.uid if requested_by else None,
                expires_at=expires_at,
                created_at=now,
            )
        )
        self.store.commit()

        reset_url = f"{settings.APP_URL.rstrip('/')}/reset-password/{raw_token}"
        html_body, text_body = render_password_reset_email(
            reset_url=reset_url,
            member_name=member.name,
            expires_at=expires_at,
            requested_by=requested_by.display_name if requested_by else None,
        )
        email_sent = self.sender.send(
            subject=f"{settings.LIBRARY_NAME}: reset your password",
            html_body=html_body,
            text_body=text_body,
            to=[member.email],
        )
        logger.info(
            "password_reset_sent",
            extra={"member_id": member.id, "email_sent": email_sent, "expires_at": expires_at.isoformat()},
        )
        return raw_token, expires_at, email_sent

    def complete_reset(self, raw_token: str, new_password: str) -> Member:
        record = (
            self.store.db.query(PasswordResetToken)
            .filter(PasswordResetToken.token_hash == hash_token(raw_token))
            .first()
        )
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reset link not found")
        if record.used_at is not None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Reset link already used")
        now = self.clock.now()
        if _as_aware(record.expires_at, self.clock) <= now:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Reset link expired")

        member = self.store.db.query(Member).filter(Member.uid == record.uid).first()
        if member is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
        validate_password(new_password)
        member.hashed_password = hash_password(new_password)
        member.updated_at = now
        record.used_at = now
        self.store.commit()
        logger.info("password_reset_completed", extra={"member_id": member.id})
        return member
