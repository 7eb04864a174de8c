from __future__ import annotations

import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy import func

from hanumant.auth.security import hash_password
from hanumant.core.clock import LibraryClock
from hanumant.models.admin import Admin
from hanumant.models.member import Member
from hanumant.schemas.member import MemberCreate, MemberUpdate
from hanumant.services.activity_log import ActivityLog
from hanumant.services.fee_cycle import FeeCycleEngine
from hanumant.services.store import LibraryStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def validate_password(password: str) -> None:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        )


class MemberRegistry:
    def __init__(
        self,
        store: LibraryStore,
        clock: LibraryClock,
        activity_log: ActivityLog,
        fee_engine: FeeCycleEngine,
    ) -> None:
        self.store = store
        self.clock = clock
        self.activity_log = activity_log
        self.fee_engine = fee_engine

    @property
    def _query(self):
        return self.store.db.query(Member)

    def _ensure_email_available(self, email: str, exclude_member_id: int | None = None) -> str:
        normalized = email.strip().lower()
        query = self._query.filter(func.lower(Member.email) == normalized)
        if exclude_member_id is not None:
            query = query.filter(Member.id != exclude_member_id)
        taken = query.first() is not None
        if not taken:
            taken = self.store.db.query(Admin).filter(func.lower(Admin.email) == normalized).first() is not None
        if taken:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
        return normalized

    def list_members(self, status_filter: str | None = None, search: str | None = None) -> list[Member]:
        query = self._query
        if status_filter:
            query = query.filter(Member.status == status_filter)
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(
                func.lower(Member.name).like(pattern)
                | func.lower(Member.email).like(pattern)
                | Member.phone.like(pattern)
            )
        return query.order_by(Member.name.asc(), Member.id.asc()).all()

    def get_member(self, member_id: int) -> Member:
        member = self.store.db.get(Member, member_id)
        if member is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
        return member

    def create_member(self, payload: MemberCreate) -> Member:
        """Register a member, provision their login and open the first fee cycle."""
        email = self._ensure_email_available(payload.email)
        validate_password(payload.password)
        now = self.clock.now()
        member = Member(
            uid=uuid.uuid4().hex,
            name=payload.name.strip(),
            email=email,
            phone=payload.phone.strip(),
            address=payload.address,
            join_date=payload.join_date or self.clock.today(),
            seat_number=payload.seat_number,
            locker_number=payload.locker_number,
            shift=payload.shift,
            monthly_fee=payload.monthly_fee,
            status=payload.status,
            hashed_password=hash_password(payload.password),
            created_at=now,
            updated_at=now,
        )
        self.store.add(member)
        self.store.flush()

        self.fee_engine.create_initial_fee(member.id, member.name, member.monthly_fee, member.join_date)
        self.activity_log.append(
            "member_added",
            member_id=member.id,
            member_name=member.name,
            details=f"New member {member.name} joined",
        )
        self.store.commit("members", "dues", "activities")
        logger.info("member_created", extra={"member_id": member.id, "join_date": member.join_date.isoformat()})
        return member

    def update_member(self, member_id: int, payload: MemberUpdate) -> Member:
        member = self.get_member(member_id)
        data = payload.model_dump(exclude_unset=True)
        if "email" in data and data["email"] is not None:
            data["email"] = self._ensure_email_available(data["email"], exclude_member_id=member.id)
        password = data.pop("password", None)
        if password:
            validate_password(password)
            member.hashed_password = hash_password(password)
        for field, value in data.items():
            if value is None and field in {"name", "email", "phone", "join_date", "monthly_fee", "status"}:
                continue
            setattr(member, field, value)
        member.updated_at = self.clock.now()
        self.store.commit("members")
        logger.info("member_updated", extra={"member_id": member.id, "fields": sorted(data)})
        return member

    def update_profile_pic(self, member: Member, profile_pic: str | None) -> Member:
        member.profile_pic = profile_pic or None
        member.updated_at = self.clock.now()
        self.store.commit("members")
        return member

    def delete_member(self, member_id: int) -> None:
        """Remove the member; their attendance and dues rows are kept as history."""
        member = self.get_member(member_id)
        name = member.name
        self.store.delete(member)
        self.activity_log.append(
            "member_removed",
            member_id=member_id,
            member_name=name,
            details=f"Member {name} was removed",
        )
        self.store.commit("members", "activities")
        logger.info("member_deleted", extra={"member_id": member_id})
