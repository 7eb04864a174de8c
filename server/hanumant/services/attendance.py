from __future__ import annotations

import calendar
import logging
from datetime import date, time

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError

from hanumant.core.clock import LibraryClock
from hanumant.models.attendance import AttendanceRecord
from hanumant.services.activity_log import ActivityLog
from hanumant.services.store import LibraryStore

logger = logging.getLogger(__name__)

TOUCHED_PATHS = ("attendance", "activities")


def session_minutes(entry_time: time, exit_time: time) -> int:
    """Minutes between two same-day clock readings, floored at zero.

    Only hours and minutes count. A session that crosses midnight yields a
    negative delta, which is clamped to 0 rather than corrected.
    """
    entry_minutes = entry_time.hour * 60 + entry_time.minute
    exit_minutes = exit_time.hour * 60 + exit_time.minute
    return max(0, exit_minutes - entry_minutes)


def open_slot_key(member_id: int, day: date) -> str:
    return f"{member_id}:{day.isoformat()}"


def month_bounds(year: int, month: int) -> tuple[date, date]:
    if not 1 <= month <= 12:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Month must be between 1 and 12")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


class AttendanceTracker:
    def __init__(
        self,
        store: LibraryStore,
        clock: LibraryClock,
        activity_log: ActivityLog,
        *,
        allow_duplicate_entry: bool = False,
    ) -> None:
        self.store = store
        self.clock = clock
        self.activity_log = activity_log
        self.allow_duplicate_entry = allow_duplicate_entry

    @property
    def _query(self):
        return self.store.db.query(AttendanceRecord)

    def mark_entry(self, member_id: int, member_name: str) -> AttendanceRecord:
        today = self.clock.today()
        if not self.allow_duplicate_entry and self.current_session(member_id) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"{member_name} is already checked in today",
            )
        record = AttendanceRecord(
            member_id=member_id,
            member_name=member_name,
            date=today,
            entry_time=self.clock.time_of_day(),
            created_at=self.clock.now(),
            open_slot=None if self.allow_duplicate_entry else open_slot_key(member_id, today),
        )
        self.store.add(record)
        self.activity_log.append(
            "entry",
            member_id=member_id,
            member_name=member_name,
            details=f"{member_name} entered the library",
        )
        try:
            self.store.commit(*TOUCHED_PATHS)
        except IntegrityError:
            # another check-in for this member committed first
            logger.warning("attendance_entry_conflict", extra={"member_id": member_id, "date": today.isoformat()})
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"{member_name} is already checked in today",
            )
        logger.info(
            "attendance_entry_marked",
            extra={"record_id": record.id, "member_id": member_id, "date": today.isoformat()},
        )
        return record

    def mark_exit(self, record_id: int) -> AttendanceRecord:
        record = self.store.db.get(AttendanceRecord, record_id)
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attendance record not found")
        if not record.is_open:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Session already closed")

        exit_time = self.clock.time_of_day()
        duration = session_minutes(record.entry_time, exit_time)
        record.exit_time = exit_time
        record.duration = duration
        record.open_slot = None
        self.activity_log.append(
            "exit",
            member_id=record.member_id,
            member_name=record.member_name,
            details=f"{record.member_name} left the library (Duration: {duration} mins)",
        )
        self.store.commit(*TOUCHED_PATHS)
        logger.info(
            "attendance_exit_marked",
            extra={"record_id": record.id, "member_id": record.member_id, "duration": duration},
        )
        return record

    def current_session(self, member_id: int) -> AttendanceRecord | None:
        """Today's open session; the most recently created one wins if several exist."""
        return (
            self._query.filter(
                AttendanceRecord.member_id == member_id,
                AttendanceRecord.date == self.clock.today(),
                AttendanceRecord.exit_time.is_(None),
            )
            .order_by(AttendanceRecord.created_at.desc(), AttendanceRecord.id.desc())
            .first()
        )

    def day_attendance(self, day: date) -> list[AttendanceRecord]:
        return (
            self._query.filter(AttendanceRecord.date == day)
            .order_by(AttendanceRecord.entry_time.desc(), AttendanceRecord.id.desc())
            .all()
        )

    def today_attendance(self) -> list[AttendanceRecord]:
        return self.day_attendance(self.clock.today())

    def member_attendance(self, member_id: int) -> list[AttendanceRecord]:
        return (
            self._query.filter(AttendanceRecord.member_id == member_id)
            .order_by(AttendanceRecord.date.desc(), AttendanceRecord.entry_time.desc(), AttendanceRecord.id.desc())
            .all()
        )

    def monthly_attendance(self, year: int, month: int) -> list[AttendanceRecord]:
        first, last = month_bounds(year, month)
        return (
            self._query.filter(AttendanceRecord.date >= first, AttendanceRecord.date <= last)
            .order_by(AttendanceRecord.date.desc(), AttendanceRecord.entry_time.desc(), AttendanceRecord.id.desc())
            .all()
        )

    def present_now(self) -> list[AttendanceRecord]:
        return [record for record in self.today_attendance() if record.is_open]
