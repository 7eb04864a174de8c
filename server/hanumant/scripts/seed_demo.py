from __future__ import annotations

import logging
import uuid
from datetime import timedelta

from sqlalchemy.orm import Session

from hanumant.auth.security import hash_password
from hanumant.core.clock import get_clock
from hanumant.core.config import settings
from hanumant.core.db import Base, SessionLocal, engine
from hanumant.models.admin import Admin
from hanumant.models.member import Member
from hanumant.schemas.member import MemberCreate
from hanumant.services.activity_log import ActivityLog
from hanumant.services.fee_cycle import FeeCycleEngine
from hanumant.services.members import MemberRegistry
from hanumant.services.store import LibraryStore

logger = logging.getLogger(__name__)

DEMO_ADMINS = [
    ("admin@hanumantlibrary.in", "Library Admin", "Demo123!"),
]

DEMO_MEMBERS = [
    ("Aarav Sharma", "aarav@hanumantlibrary.in", "9876500001", "A-01", "Morning", 500, 45),
    ("Priya Verma", "priya@hanumantlibrary.in", "9876500002", "A-02", "Evening", 500, 20),
    ("Rohit Yadav", "rohit@hanumantlibrary.in", "9876500003", "B-07", "Full Day", 800, 5),
]


def ensure_admin(db: Session, email: str, full_name: str, password: str) -> Admin:
    admin = db.query(Admin).filter(Admin.email == email).first()
    if admin:
        return admin
    admin = Admin(uid=uuid.uuid4().hex, email=email, full_name=full_name, hashed_password=hash_password(password))
    db.add(admin)
    db.commit()
    return admin


def main() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        for email, full_name, password in DEMO_ADMINS:
            ensure_admin(db, email, full_name, password)

        clock = get_clock()
        store = LibraryStore(db)
        activity_log = ActivityLog(store, clock)
        fee_engine = FeeCycleEngine(store, clock, activity_log, cycle_days=settings.FEE_CYCLE_DAYS)
        registry = MemberRegistry(store, clock, activity_log, fee_engine)
        today = clock.today()
        for name, email, phone, seat, shift, fee, days_ago in DEMO_MEMBERS:
            if db.query(Member).filter(Member.email == email).first():
                continue
            registry.create_member(
                MemberCreate(
                    name=name,
                    email=email,
                    phone=phone,
                    seat_number=seat,
                    shift=shift,
                    monthly_fee=fee,
                    join_date=today - timedelta(days=days_ago),
                    password="Demo123!",
                )
            )
        logger.info("demo_seed_complete", extra={"members": len(DEMO_MEMBERS)})
    finally:
        db.close()


if __name__ == "__main__":
    main()
