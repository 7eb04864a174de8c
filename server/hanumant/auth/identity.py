from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from sqlalchemy.orm import Session

from hanumant.models.admin import Admin
from hanumant.models.member import Member

Role = Literal["admin", "user"]


@dataclass
class Identity:
    uid: str
    role: Role
    display_name: str
    admin: Optional[Admin] = None
    member: Optional[Member] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def resolve_identity(db: Session, uid: str) -> Identity | None:
    """Admin registry first, then member registry, else nobody.

    A uid present in both registries resolves as admin.
    """
    admin = db.query(Admin).filter(Admin.uid == uid).first()
    if admin is not None:
        return Identity(uid=uid, role="admin", display_name=admin.full_name or admin.email, admin=admin)
    member = db.query(Member).filter(Member.uid == uid).first()
    if member is not None:
        return Identity(uid=uid, role="user", display_name=member.name, member=member)
    return None


def resolve_role(db: Session, uid: str) -> Role | None:
    identity = resolve_identity(db, uid)
    return identity.role if identity else None
