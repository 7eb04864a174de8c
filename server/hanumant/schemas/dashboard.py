from __future__ import annotations

from pydantic import BaseModel

from hanumant.schemas.activity import ActivityOut
from hanumant.schemas.attendance import AttendanceOut
from hanumant.schemas.fee import FeeRecordOut


class DashboardStats(BaseModel):
    total_members: int
    active_members: int
    present_now: int
    today_visits: int
    pending_dues: int
    pending_amount: int


class DashboardSummary(BaseModel):
    stats: DashboardStats
    today_attendance: list[AttendanceOut]
    recent_activities: list[ActivityOut]
    pending_dues: list[FeeRecordOut]
