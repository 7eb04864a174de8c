from __future__ import annotations

import re
from datetime import date, datetime, timedelta

import pytest
from fastapi import HTTPException

from hanumant.models.activity import Activity
from hanumant.models.fee import FeeRecord
from hanumant.services.fee_cycle import (
    ALLOWED_TRANSITIONS,
    FeeStatus,
    FeeTransitionError,
    billing_period,
    ensure_transition,
    export_window_start,
    next_status,
)


def _member_dues(db_session, member_id):
    return (
        db_session.query(FeeRecord)
        .filter(FeeRecord.member_id == member_id)
        .order_by(FeeRecord.period_start.asc())
        .all()
    )


def test_next_status_marks_pending_overdue_only_after_due_date():
    due = date(2024, 1, 31)
    assert next_status("pending", due, date(2024, 1, 31)) is FeeStatus.PENDING
    assert next_status("pending", due, date(2024, 2, 1)) is FeeStatus.OVERDUE
    assert next_status("overdue", due, date(2024, 1, 1)) is FeeStatus.OVERDUE
    assert next_status("paid", due, date(2024, 6, 1)) is FeeStatus.PAID


def test_paid_is_terminal_and_overdue_only_from_pending():
    assert ALLOWED_TRANSITIONS[FeeStatus.PAID] == frozenset()
    sources_of_overdue = {source for source, targets in ALLOWED_TRANSITIONS.items() if FeeStatus.OVERDUE in targets}
    assert sources_of_overdue == {FeeStatus.PENDING}
    sources_of_paid = {source for source, targets in ALLOWED_TRANSITIONS.items() if FeeStatus.PAID in targets}
    assert sources_of_paid == {FeeStatus.PENDING, FeeStatus.OVERDUE}

    for target in ("pending", "overdue", "paid"):
        with pytest.raises(FeeTransitionError):
            ensure_transition("paid", target)
    with pytest.raises(FeeTransitionError):
        ensure_transition("overdue", "pending")


def test_billing_period_spans_thirty_days():
    assert billing_period(date(2024, 1, 1)) == (date(2024, 1, 1), date(2024, 1, 31))
    assert billing_period(date(2024, 1, 31)) == (date(2024, 1, 31), date(2024, 3, 1))


def test_export_window_start_rejects_unknown_window():
    now = datetime(2024, 3, 31, 10, 0)
    assert export_window_start("monthly", now) == datetime(2024, 2, 29, 10, 0)
    assert export_window_start("yearly", now) == datetime(2023, 3, 31, 10, 0)
    with pytest.raises(HTTPException) as excinfo:
        export_window_start("hourly", now)
    assert excinfo.value.status_code == 400


def test_member_join_opens_initial_cycle(db_session, member):
    dues = _member_dues(db_session, member.id)
    assert len(dues) == 1
    first = dues[0]
    assert first.period_start == date(2024, 1, 1)
    assert first.period_end == date(2024, 1, 31)
    assert first.due_date == date(2024, 1, 31)
    assert first.status == "pending"
    assert first.amount == 500
    assert first.paid_date is None
    assert first.receipt_number is None


def test_mark_as_paid_issues_receipt_and_chains_next_cycle(db_session, clock, fee_engine, member):
    clock.advance_to(datetime(2024, 1, 20, 11, 0))
    due = _member_dues(db_session, member.id)[0]

    paid = fee_engine.mark_as_paid(due.id)

    assert paid.status == "paid"
    assert paid.paid_date is not None
    assert re.match(r"^RCP-\d+$", paid.receipt_number)
    assert paid.receipt_number == f"RCP-{clock.now_ms()}"

    dues = _member_dues(db_session, member.id)
    assert [(record.period_start, record.period_end) for record in dues] == [
        (date(2024, 1, 1), date(2024, 1, 31)),
        (date(2024, 1, 31), date(2024, 3, 1)),
    ]
    assert dues[1].status == "pending"
    assert dues[1].amount == 500

    payments = db_session.query(Activity).filter(Activity.type == "payment").all()
    assert len(payments) == 1
    assert payments[0].details == "Payment of ₹500 received from Asha Gupta"


def test_chained_cycles_tile_the_calendar(db_session, clock, fee_engine, member):
    for month in range(1, 6):
        clock.advance_to(datetime(2024, month, 10, 10, 0))
        pending = [record for record in _member_dues(db_session, member.id) if record.status != "paid"]
        fee_engine.mark_as_paid(pending[0].id)

    dues = _member_dues(db_session, member.id)
    assert len(dues) == 6
    for current, following in zip(dues, dues[1:]):
        assert current.period_end == following.period_start
    for record in dues:
        assert record.period_end - record.period_start == timedelta(days=30)
        assert record.due_date == record.period_end


def test_next_cycle_creation_is_idempotent(db_session, fee_engine, member):
    first = fee_engine.create_next_cycle_fee(member.id, member.name, 500, date(2024, 1, 31))
    second = fee_engine.create_next_cycle_fee(member.id, member.name, 700, date(2024, 1, 31))
    db_session.commit()

    assert first.id == second.id
    assert second.amount == 500
    assert len(_member_dues(db_session, member.id)) == 2


def test_next_cycle_insert_conflict_returns_winning_row(db_session, clock, fee_engine, member, monkeypatch):
    winner = FeeRecord(
        member_id=member.id,
        member_name=member.name,
        period_start=date(2024, 1, 31),
        period_end=date(2024, 3, 1),
        amount=500,
        due_date=date(2024, 3, 1),
        status="pending",
        created_at=clock.now(),
        updated_at=clock.now(),
    )
    db_session.add(winner)
    db_session.commit()

    real_find = fee_engine._find_cycle
    calls = {"count": 0}

    def racing_find(member_id, period_start):
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return real_find(member_id, period_start)

    monkeypatch.setattr(fee_engine, "_find_cycle", racing_find)

    record = fee_engine.create_next_cycle_fee(member.id, member.name, 500, date(2024, 1, 31))

    assert record.id == winner.id
    assert calls["count"] == 2
    count = (
        db_session.query(FeeRecord)
        .filter(FeeRecord.member_id == member.id, FeeRecord.period_start == date(2024, 1, 31))
        .count()
    )
    assert count == 1


def test_paying_a_paid_record_conflicts(db_session, fee_engine, member):
    due = _member_dues(db_session, member.id)[0]
    fee_engine.mark_as_paid(due.id)

    with pytest.raises(HTTPException) as excinfo:
        fee_engine.mark_as_paid(due.id)
    assert excinfo.value.status_code == 409


def test_reconcile_moves_stale_pending_to_overdue(db_session, clock, fee_engine, member):
    clock.advance_to(datetime(2024, 2, 5, 10, 0))

    assert fee_engine.reconcile_overdue() == 1
    due = _member_dues(db_session, member.id)[0]
    assert due.status == "overdue"

    assert fee_engine.reconcile_overdue() == 0

    fee_engine.mark_as_paid(due.id)
    assert due.status == "paid"
    clock.advance_to(datetime(2024, 6, 1, 10, 0))
    fee_engine.reconcile_overdue()
    assert due.status == "paid"


def test_reconcile_leaves_records_due_today_pending(db_session, clock, fee_engine, member):
    clock.advance_to(datetime(2024, 1, 31, 18, 0))
    assert fee_engine.reconcile_overdue() == 0
    assert _member_dues(db_session, member.id)[0].status == "pending"


def test_manual_payment_creates_standalone_paid_record(db_session, fee_engine, member):
    record = fee_engine.record_payment(
        member_id=member.id,
        member_name=member.name,
        period_start=date(2023, 12, 1),
        period_end=date(2023, 12, 31),
        amount=450,
        payment_date=date(2023, 12, 3),
    )

    assert record.status == "paid"
    assert record.amount == 450
    assert record.paid_date.date() == date(2023, 12, 3)
    assert len(_member_dues(db_session, member.id)) == 2


def test_manual_payment_for_existing_period_pays_that_record(db_session, fee_engine, member):
    due = _member_dues(db_session, member.id)[0]

    record = fee_engine.record_payment(
        member_id=member.id,
        member_name=member.name,
        period_start=due.period_start,
        period_end=due.period_end,
        amount=500,
    )

    assert record.id == due.id
    assert record.status == "paid"
    assert len(_member_dues(db_session, member.id)) == 1


def test_manual_payment_with_mismatched_period_end_is_rejected(db_session, fee_engine, member):
    due = _member_dues(db_session, member.id)[0]

    with pytest.raises(HTTPException) as excinfo:
        fee_engine.record_payment(
            member_id=member.id,
            member_name=member.name,
            period_start=due.period_start,
            period_end=due.period_end + timedelta(days=5),
            amount=500,
        )

    assert excinfo.value.status_code == 400
    db_session.refresh(due)
    assert due.status == "pending"
    assert due.receipt_number is None


def test_record_payment_validates_period_and_amount(fee_engine, member):
    with pytest.raises(HTTPException) as excinfo:
        fee_engine.record_payment(
            member_id=member.id,
            member_name=member.name,
            period_start=date(2024, 2, 1),
            period_end=date(2024, 2, 1),
            amount=500,
        )
    assert excinfo.value.status_code == 400

    with pytest.raises(HTTPException) as excinfo:
        fee_engine.record_payment(
            member_id=member.id,
            member_name=member.name,
            period_start=date(2024, 2, 1),
            period_end=date(2024, 3, 2),
            amount=0,
        )
    assert excinfo.value.status_code == 400


def test_receipt_numbers_stay_unique_within_one_millisecond(db_session, fee_engine, make_member):
    first_member = make_member()
    second_member = make_member(name="Vikram Singh", email="vikram@hanumantlibrary.in")

    first = fee_engine.mark_as_paid(_member_dues(db_session, first_member.id)[0].id)
    second = fee_engine.mark_as_paid(_member_dues(db_session, second_member.id)[0].id)

    assert first.receipt_number != second.receipt_number
    assert int(second.receipt_number[4:]) == int(first.receipt_number[4:]) + 1


def test_delete_payment_keeps_chained_cycle(db_session, fee_engine, member):
    due = _member_dues(db_session, member.id)[0]
    fee_engine.mark_as_paid(due.id)
    activity_count = db_session.query(Activity).count()

    fee_engine.delete_payment(due.id)

    dues = _member_dues(db_session, member.id)
    assert [record.period_start for record in dues] == [date(2024, 1, 31)]
    assert db_session.query(Activity).count() == activity_count
