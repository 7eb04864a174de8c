from __future__ import annotations

from hanumant.models.member import Member
from hanumant.schemas.activity import ActivityOut
from hanumant.schemas.attendance import AttendanceOut
from hanumant.schemas.dashboard import DashboardStats, DashboardSummary
from hanumant.schemas.fee import FeeRecordOut
from hanumant.services.activity_log import ActivityLog
from hanumant.services.attendance import AttendanceTracker
from hanumant.services.fee_cycle import FeeCycleEngine

TODAY_ATTENDANCE_WINDOW = 8
RECENT_ACTIVITY_WINDOW = 10
PENDING_DUES_WINDOW = 5


def build_dashboard(
    tracker: AttendanceTracker,
    fee_engine: FeeCycleEngine,
    activity_log: ActivityLog,
) -> DashboardSummary:
    fee_engine.reconcile_overdue()
    db = tracker.store.db
    total_members = db.query(Member).count()
    active_members = db.query(Member).filter(Member.status == "active").count()
    today = tracker.today_attendance()
    pending = fee_engine.pending_dues()

    stats = DashboardStats(
        total_members=total_members,
        active_members=active_members,
        present_now=sum(1 for record in today if record.is_open),
        today_visits=len(today),
        pending_dues=len(pending),
        pending_amount=sum(record.amount for record in pending),
    )
    return DashboardSummary(
        stats=stats,
        today_attendance=[AttendanceOut.model_validate(record) for record in today[:TODAY_ATTENDANCE_WINDOW]],
        recent_activities=[ActivityOut.model_validate(item) for item in activity_log.recent(RECENT_ACTIVITY_WINDOW)],
        pending_dues=[FeeRecordOut.model_validate(record) for record in pending[:PENDING_DUES_WINDOW]],
    )
