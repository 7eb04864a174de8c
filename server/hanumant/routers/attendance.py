from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from hanumant.auth.deps import get_attendance_tracker, get_member_registry, require_admin
from hanumant.auth.identity import Identity
from hanumant.schemas.attendance import AttendanceEntryRequest, AttendanceOut
from hanumant.services.attendance import AttendanceTracker
from hanumant.services.exports import attendance_csv
from hanumant.services.members import MemberRegistry

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post("/entry", response_model=AttendanceOut, status_code=status.HTTP_201_CREATED)
def mark_entry(
    payload: AttendanceEntryRequest,
    tracker: AttendanceTracker = Depends(get_attendance_tracker),
    registry: MemberRegistry = Depends(get_member_registry),
    _: Identity = Depends(require_admin),
) -> AttendanceOut:
    member = registry.get_member(payload.member_id)
    return tracker.mark_entry(member.id, member.name)


@router.post("/{record_id}/exit", response_model=AttendanceOut)
def mark_exit(
    record_id: int,
    tracker: AttendanceTracker = Depends(get_attendance_tracker),
    _: Identity = Depends(require_admin),
) -> AttendanceOut:
    return tracker.mark_exit(record_id)


@router.get("/today", response_model=list[AttendanceOut])
def today_attendance(
    tracker: AttendanceTracker = Depends(get_attendance_tracker),
    _: Identity = Depends(require_admin),
) -> list[AttendanceOut]:
    return tracker.today_attendance()


@router.get("/present", response_model=list[AttendanceOut])
def present_now(
    tracker: AttendanceTracker = Depends(get_attendance_tracker),
    _: Identity = Depends(require_admin),
) -> list[AttendanceOut]:
    return tracker.present_now()


@router.get("/day", response_model=list[AttendanceOut])
def day_attendance(
    day: date = Query(...),
    tracker: AttendanceTracker = Depends(get_attendance_tracker),
    _: Identity = Depends(require_admin),
) -> list[AttendanceOut]:
    return tracker.day_attendance(day)


@router.get("/month", response_model=list[AttendanceOut])
def monthly_attendance(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(...),
    tracker: AttendanceTracker = Depends(get_attendance_tracker),
    _: Identity = Depends(require_admin),
) -> list[AttendanceOut]:
    return tracker.monthly_attendance(year, month)


@router.get("/member/{member_id}", response_model=list[AttendanceOut])
def member_attendance(
    member_id: int,
    tracker: AttendanceTracker = Depends(get_attendance_tracker),
    _: Identity = Depends(require_admin),
) -> list[AttendanceOut]:
    return tracker.member_attendance(member_id)


@router.get("/export.csv")
def export_attendance(
    *,
    day: Optional[date] = Query(default=None),
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    month: Optional[int] = Query(default=None),
    tracker: AttendanceTracker = Depends(get_attendance_tracker),
    _: Identity = Depends(require_admin),
) -> StreamingResponse:
    if day is not None:
        return attendance_csv(tracker.day_attendance(day), day.isoformat())
    if year is not None and month is not None:
        records = tracker.monthly_attendance(year, month)
        return attendance_csv(records, f"{year:04d}-{month:02d}")
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Provide either a day or a year and month to export",
    )
