from __future__ import annotations

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from hanumant.core.config import settings


class LibraryClock:
    """Wall clock of the library, always in its local timezone.

    Attendance dates and fee due dates are calendar dates at the library, so
    "today" must never be derived from UTC.
    """

    def __init__(self, tz_name: str | None = None) -> None:
        self.tz = ZoneInfo(tz_name or settings.LIBRARY_TIMEZONE)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()

    def time_of_day(self) -> time:
        return self.now().time().replace(microsecond=0)

    def now_ms(self) -> int:
        return int(self.now().timestamp() * 1000)


class FrozenClock(LibraryClock):
    """Clock pinned to a fixed local instant; used by scripts and tests."""

    def __init__(self, instant: datetime, tz_name: str | None = None) -> None:
        super().__init__(tz_name)
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=self.tz)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def advance_to(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=self.tz)
        self.instant = instant


_clock = LibraryClock()


def get_clock() -> LibraryClock:
    return _clock
