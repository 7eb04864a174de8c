from datetime import timedelta

from sqlalchemy.orm import sessionmaker

from hanumant.core.config import settings
from hanumant.models.admin import Admin
from hanumant.models.fee import FeeRecord
from hanumant.scripts import seed_demo


def test_seed_opens_cycles_with_configured_length(db_session, clock, monkeypatch):
    bind = db_session.get_bind()
    monkeypatch.setattr(seed_demo, "engine", bind)
    monkeypatch.setattr(seed_demo, "SessionLocal", sessionmaker(bind=bind, autoflush=False, expire_on_commit=False))
    monkeypatch.setattr(seed_demo, "get_clock", lambda: clock)
    monkeypatch.setattr(settings, "FEE_CYCLE_DAYS", 15)

    seed_demo.main()

    dues = db_session.query(FeeRecord).all()
    assert len(dues) == len(seed_demo.DEMO_MEMBERS)
    assert {due.period_end - due.period_start for due in dues} == {timedelta(days=15)}
    assert db_session.query(Admin).count() == 1
