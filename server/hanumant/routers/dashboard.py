from fastapi import APIRouter, Depends

from hanumant.auth.deps import get_activity_log, get_attendance_tracker, get_fee_engine, require_admin
from hanumant.auth.identity import Identity
from hanumant.schemas.dashboard import DashboardSummary
from hanumant.services.activity_log import ActivityLog
from hanumant.services.attendance import AttendanceTracker
from hanumant.services.dashboard import build_dashboard
from hanumant.services.fee_cycle import FeeCycleEngine

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardSummary)
def admin_dashboard(
    tracker: AttendanceTracker = Depends(get_attendance_tracker),
    fee_engine: FeeCycleEngine = Depends(get_fee_engine),
    activity_log: ActivityLog = Depends(get_activity_log),
    _: Identity = Depends(require_admin),
) -> DashboardSummary:
    return build_dashboard(tracker, fee_engine, activity_log)
