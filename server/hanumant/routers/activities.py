from fastapi import APIRouter, Depends, Query

from hanumant.auth.deps import get_activity_log, require_admin
from hanumant.auth.identity import Identity
from hanumant.core.config import settings
from hanumant.schemas.activity import ActivityOut
from hanumant.services.activity_log import ActivityLog

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get("", response_model=list[ActivityOut])
def recent_activities(
    limit: int = Query(settings.ACTIVITY_FEED_LIMIT, ge=1),
    activity_log: ActivityLog = Depends(get_activity_log),
    _: Identity = Depends(require_admin),
) -> list[ActivityOut]:
    return activity_log.recent(min(limit, settings.ACTIVITY_FEED_LIMIT))
