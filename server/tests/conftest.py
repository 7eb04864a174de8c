from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from collections.abc import Callable, Generator
from datetime import date, datetime

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from hanumant.auth.deps import get_current_identity
from hanumant.auth.identity import resolve_identity
from hanumant.auth.security import hash_password
from hanumant.core.clock import FrozenClock, get_clock
from hanumant.core.db import Base, get_db
from hanumant.main import app
from hanumant.models.admin import Admin
from hanumant.models.member import Member
from hanumant.schemas.member import MemberCreate
from hanumant.services.activity_log import ActivityLog
from hanumant.services.attendance import AttendanceTracker
from hanumant.services.fee_cycle import FeeCycleEngine
from hanumant.services.members import MemberRegistry
from hanumant.services.store import LibraryStore

SQLALCHEMY_TEST_URL = "sqlite+pysqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

MEMBER_PASSWORD = "reading-room"
ADMIN_PASSWORD = "front-desk-1"


def override_get_db() -> Generator[Session, None, None]:
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock(datetime(2024, 1, 5, 9, 0))


@pytest.fixture()
def store(db_session: Session) -> LibraryStore:
    return LibraryStore(db_session)


@pytest.fixture()
def activity_log(store: LibraryStore, clock: FrozenClock) -> ActivityLog:
    return ActivityLog(store, clock)


@pytest.fixture()
def fee_engine(store: LibraryStore, clock: FrozenClock, activity_log: ActivityLog) -> FeeCycleEngine:
    return FeeCycleEngine(store, clock, activity_log)


@pytest.fixture()
def tracker(store: LibraryStore, clock: FrozenClock, activity_log: ActivityLog) -> AttendanceTracker:
    return AttendanceTracker(store, clock, activity_log)


@pytest.fixture()
def registry(
    store: LibraryStore, clock: FrozenClock, activity_log: ActivityLog, fee_engine: FeeCycleEngine
) -> MemberRegistry:
    return MemberRegistry(store, clock, activity_log, fee_engine)


@pytest.fixture()
def client(db_session: Session, clock: FrozenClock) -> Generator[TestClient, None, None]:
    app.dependency_overrides.clear()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def authorize(client: TestClient) -> Generator[Callable[[str], None], None, None]:
    def _apply(uid: str) -> None:
        def _identity(db: Session = Depends(get_db)):
            return resolve_identity(db, uid)

        app.dependency_overrides[get_current_identity] = _identity

    yield _apply
    app.dependency_overrides.pop(get_current_identity, None)


@pytest.fixture()
def admin(db_session: Session) -> Admin:
    account = Admin(
        uid="admin-uid",
        email="desk@hanumantlibrary.in",
        full_name="Front Desk",
        hashed_password=hash_password(ADMIN_PASSWORD),
    )
    db_session.add(account)
    db_session.commit()
    return account


@pytest.fixture()
def make_member(registry: MemberRegistry) -> Callable[..., Member]:
    def _make(
        name: str = "Asha Gupta",
        email: str = "asha@hanumantlibrary.in",
        join_date: date = date(2024, 1, 1),
        monthly_fee: int = 500,
        **extra,
    ) -> Member:
        payload = MemberCreate(
            name=name,
            email=email,
            phone="9800000001",
            join_date=join_date,
            monthly_fee=monthly_fee,
            password=MEMBER_PASSWORD,
            **extra,
        )
        return registry.create_member(payload)

    return _make


@pytest.fixture()
def member(make_member: Callable[..., Member]) -> Member:
    return make_member()


@pytest.fixture()
def as_admin(authorize, admin: Admin) -> Admin:
    authorize(admin.uid)
    return admin


@pytest.fixture()
def as_member(authorize, member: Member) -> Member:
    authorize(member.uid)
    return member
