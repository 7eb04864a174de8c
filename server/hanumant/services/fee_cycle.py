"""Recurring 30-day fee cycles.

Each member owns a chain of FeeRecords that tile the calendar: the first
period starts on the join date and every payment of a chained period opens
the next one at the previous period's end. Status moves only along

    pending -> overdue   (due date passed, evaluated lazily on read)
    pending -> paid
    overdue -> paid

and ``paid`` is terminal.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, time, timedelta
from enum import Enum

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from hanumant.core.clock import LibraryClock
from hanumant.models.fee import FeeRecord
from hanumant.services.activity_log import ActivityLog
from hanumant.services.notifications import notify_fee_overdue
from hanumant.services.store import LibraryStore

logger = logging.getLogger(__name__)

DEFAULT_CYCLE_DAYS = 30
RECEIPT_PREFIX = "RCP-"
EXPORT_WINDOWS = ("daily", "weekly", "monthly", "yearly")


class FeeStatus(str, Enum):
    PENDING = "pending"
    OVERDUE = "overdue"
    PAID = "paid"


ALLOWED_TRANSITIONS: dict[FeeStatus, frozenset[FeeStatus]] = {
    FeeStatus.PENDING: frozenset({FeeStatus.OVERDUE, FeeStatus.PAID}),
    FeeStatus.OVERDUE: frozenset({FeeStatus.PAID}),
    FeeStatus.PAID: frozenset(),
}

UNPAID_STATUSES = (FeeStatus.PENDING.value, FeeStatus.OVERDUE.value)


class FeeTransitionError(ValueError):
    pass


def next_status(current: str, due_date: date, today: date) -> FeeStatus:
    """Status a record should hold on ``today`` absent any payment."""
    current_status = FeeStatus(current)
    if current_status is FeeStatus.PENDING and due_date < today:
        return FeeStatus.OVERDUE
    return current_status


def ensure_transition(current: str, target: str) -> FeeStatus:
    current_status = FeeStatus(current)
    target_status = FeeStatus(target)
    if target_status not in ALLOWED_TRANSITIONS[current_status]:
        raise FeeTransitionError(f"Cannot move a {current_status.value} fee to {target_status.value}")
    return target_status


def billing_period(start: date, cycle_days: int = DEFAULT_CYCLE_DAYS) -> tuple[date, date]:
    return start, start + timedelta(days=cycle_days)


def _shift_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def export_window_start(window: str, now: datetime) -> datetime:
    if window == "daily":
        return now - timedelta(days=1)
    if window == "weekly":
        return now - timedelta(weeks=1)
    if window == "monthly":
        return _shift_months(now, -1)
    if window == "yearly":
        return _shift_months(now, -12)
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Export period must be one of: {', '.join(EXPORT_WINDOWS)}",
    )


class FeeCycleEngine:
    def __init__(
        self,
        store: LibraryStore,
        clock: LibraryClock,
        activity_log: ActivityLog,
        *,
        cycle_days: int = DEFAULT_CYCLE_DAYS,
    ) -> None:
        self.store = store
        self.clock = clock
        self.activity_log = activity_log
        self.cycle_days = cycle_days

    @property
    def _query(self):
        return self.store.db.query(FeeRecord)

    def _find_cycle(self, member_id: int, period_start: date) -> FeeRecord | None:
        return self._query.filter(FeeRecord.member_id == member_id, FeeRecord.period_start == period_start).first()

    def _ensure_cycle(
        self,
        member_id: int,
        member_name: str,
        amount: int,
        period_start: date,
        period_end: date | None = None,
    ) -> tuple[FeeRecord, bool]:
        """Create the cycle keyed by (member_id, period_start) unless it exists.

        The unique key makes this a compare-and-swap: a concurrent writer that
        inserts the same key first makes our insert fail, and its row is
        returned instead.
        """
        existing = self._find_cycle(member_id, period_start)
        if existing is not None:
            return existing, False
        if period_end is None:
            period_start, period_end = billing_period(period_start, self.cycle_days)
        now = self.clock.now()
        record = FeeRecord(
            member_id=member_id,
            member_name=member_name,
            period_start=period_start,
            period_end=period_end,
            amount=amount,
            due_date=period_end,
            status=FeeStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        try:
            with self.store.db.begin_nested():
                self.store.db.add(record)
        except IntegrityError:
            logger.info(
                "fee_cycle_insert_conflict",
                extra={"member_id": member_id, "period_start": period_start.isoformat()},
            )
            winner = self._find_cycle(member_id, period_start)
            if winner is None:
                raise
            return winner, False
        return record, True

    def _transition(self, record: FeeRecord, target: FeeStatus) -> None:
        try:
            ensure_transition(record.status, target.value)
        except FeeTransitionError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        record.status = target.value
        record.updated_at = self.clock.now()

    def _issue_receipt_number(self) -> str:
        millis = self.clock.now_ms()
        while self._query.filter(FeeRecord.receipt_number == f"{RECEIPT_PREFIX}{millis}").first() is not None:
            millis += 1
        return f"{RECEIPT_PREFIX}{millis}"

    def _paid_at(self, payment_date: date | None) -> datetime:
        if payment_date is None:
            return self.clock.now()
        return datetime.combine(payment_date, time(12, 0), tzinfo=self.clock.tz)

    def create_initial_fee(self, member_id: int, member_name: str, amount: int, join_date: date) -> FeeRecord:
        """Open the first cycle at the join date; staged on the caller's unit of work."""
        record, created = self._ensure_cycle(member_id, member_name, amount, join_date)
        if created:
            logger.info(
                "fee_cycle_opened",
                extra={"member_id": member_id, "period_start": record.period_start.isoformat()},
            )
        return record

    def create_next_cycle_fee(
        self,
        member_id: int,
        member_name: str,
        amount: int,
        previous_period_end: date,
    ) -> FeeRecord:
        record, created = self._ensure_cycle(member_id, member_name, amount, previous_period_end)
        if created:
            logger.info(
                "fee_cycle_chained",
                extra={
                    "member_id": member_id,
                    "period_start": record.period_start.isoformat(),
                    "period_end": record.period_end.isoformat(),
                },
            )
        return record

    def record_payment(
        self,
        *,
        member_id: int,
        member_name: str,
        period_start: date,
        period_end: date,
        amount: int,
        payment_date: date | None = None,
        chain_next: bool = False,
        next_amount: int | None = None,
    ) -> FeeRecord:
        """Settle the period starting at ``period_start``.

        Pays the existing record for that period or, for an out-of-band
        payment, creates it first. With ``chain_next`` the following period is
        opened as well. A period that already has a record keeps its bounds, so
        a differing ``period_end`` is rejected.
        """
        if period_end <= period_start:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Period end must be after period start")
        if amount <= 0:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Amount must be greater than zero")

        record, created = self._ensure_cycle(member_id, member_name, amount, period_start, period_end)
        if not created and record.period_end != period_end:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Period starting {period_start.isoformat()} ends on {record.period_end.isoformat()}",
            )
        self._transition(record, FeeStatus.PAID)
        record.amount = amount
        record.paid_date = self._paid_at(payment_date)
        record.receipt_number = self._issue_receipt_number()
        self.activity_log.append(
            "payment",
            member_id=member_id,
            member_name=member_name,
            details=f"Payment of ₹{amount} received from {member_name}",
        )
        if chain_next:
            self.create_next_cycle_fee(member_id, member_name, next_amount or amount, record.period_end)
        self.store.commit("dues", "activities")
        logger.info(
            "payment_recorded",
            extra={
                "due_id": record.id,
                "member_id": member_id,
                "amount": amount,
                "receipt_number": record.receipt_number,
                "chained": chain_next,
            },
        )
        return record

    def mark_as_paid(self, due_id: int, *, next_amount: int | None = None) -> FeeRecord:
        record = self.get_due(due_id)
        return self.record_payment(
            member_id=record.member_id,
            member_name=record.member_name,
            period_start=record.period_start,
            period_end=record.period_end,
            amount=record.amount,
            chain_next=True,
            next_amount=next_amount,
        )

    def delete_payment(self, due_id: int) -> None:
        """Hard delete; leaves any cycle chained from it in place."""
        record = self.get_due(due_id)
        self.store.delete(record)
        self.store.commit("dues")
        logger.info("due_deleted", extra={"due_id": due_id, "member_id": record.member_id})

    def reconcile_overdue(self) -> int:
        """Move every pending record whose due date has passed to overdue."""
        today = self.clock.today()
        candidates = self._query.filter(
            FeeRecord.status == FeeStatus.PENDING.value,
            FeeRecord.due_date < today,
        ).all()
        changed = []
        for record in candidates:
            target = next_status(record.status, record.due_date, today)
            if target is FeeStatus.OVERDUE:
                self._transition(record, target)
                changed.append(record)
        if not changed:
            return 0
        self.store.commit("dues")
        for record in changed:
            notify_fee_overdue(record)
        return len(changed)

    def get_due(self, due_id: int) -> FeeRecord:
        record = self.store.db.get(FeeRecord, due_id)
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee record not found")
        return record

    def all_dues(self) -> list[FeeRecord]:
        return self._ordered(self._query).all()

    def member_dues(self, member_id: int) -> list[FeeRecord]:
        return self._ordered(self._query.filter(FeeRecord.member_id == member_id)).all()

    def pending_dues(self) -> list[FeeRecord]:
        return (
            self._query.filter(FeeRecord.status.in_(UNPAID_STATUSES))
            .order_by(FeeRecord.due_date.asc(), FeeRecord.id.asc())
            .all()
        )

    def receipts(self) -> list[FeeRecord]:
        return (
            self._query.filter(FeeRecord.status == FeeStatus.PAID.value)
            .order_by(FeeRecord.paid_date.desc(), FeeRecord.id.desc())
            .all()
        )

    def paid_since(self, start: datetime) -> list[FeeRecord]:
        return (
            self._query.filter(FeeRecord.status == FeeStatus.PAID.value, FeeRecord.paid_date > start)
            .order_by(FeeRecord.paid_date.desc(), FeeRecord.id.desc())
            .all()
        )

    @staticmethod
    def _ordered(query):
        return query.order_by(func.coalesce(FeeRecord.paid_date, FeeRecord.created_at).desc(), FeeRecord.id.desc())
