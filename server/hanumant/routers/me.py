from fastapi import APIRouter, Depends, HTTPException, status

from hanumant.auth.deps import (
    get_attendance_tracker,
    get_fee_engine,
    get_member_registry,
    require_member,
)
from hanumant.auth.identity import Identity
from hanumant.schemas.attendance import AttendanceOut, CurrentSessionOut
from hanumant.schemas.fee import FeeRecordOut
from hanumant.schemas.member import MemberOut, ProfilePicUpdate
from hanumant.services.attendance import AttendanceTracker
from hanumant.services.fee_cycle import FeeCycleEngine
from hanumant.services.members import MemberRegistry

router = APIRouter(prefix="/me", tags=["me"])


@router.get("", response_model=MemberOut)
def read_profile(identity: Identity = Depends(require_member)) -> MemberOut:
    return identity.member


@router.patch("/profile-pic", response_model=MemberOut)
def update_profile_pic(
    payload: ProfilePicUpdate,
    registry: MemberRegistry = Depends(get_member_registry),
    identity: Identity = Depends(require_member),
) -> MemberOut:
    return registry.update_profile_pic(identity.member, payload.profile_pic)


@router.get("/attendance", response_model=list[AttendanceOut])
def my_attendance(
    tracker: AttendanceTracker = Depends(get_attendance_tracker),
    identity: Identity = Depends(require_member),
) -> list[AttendanceOut]:
    return tracker.member_attendance(identity.member.id)


@router.get("/attendance/current", response_model=CurrentSessionOut)
def my_current_session(
    tracker: AttendanceTracker = Depends(get_attendance_tracker),
    identity: Identity = Depends(require_member),
) -> CurrentSessionOut:
    session = tracker.current_session(identity.member.id)
    if session is None:
        return CurrentSessionOut(checked_in=False)
    return CurrentSessionOut(checked_in=True, session=AttendanceOut.model_validate(session))


@router.post("/attendance/entry", response_model=AttendanceOut, status_code=status.HTTP_201_CREATED)
def check_in(
    tracker: AttendanceTracker = Depends(get_attendance_tracker),
    identity: Identity = Depends(require_member),
) -> AttendanceOut:
    member = identity.member
    if not member.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Membership is inactive")
    return tracker.mark_entry(member.id, member.name)


@router.post("/attendance/exit", response_model=AttendanceOut)
def check_out(
    tracker: AttendanceTracker = Depends(get_attendance_tracker),
    identity: Identity = Depends(require_member),
) -> AttendanceOut:
    session = tracker.current_session(identity.member.id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No open session today")
    return tracker.mark_exit(session.id)


@router.get("/dues", response_model=list[FeeRecordOut])
def my_dues(
    fee_engine: FeeCycleEngine = Depends(get_fee_engine),
    identity: Identity = Depends(require_member),
) -> list[FeeRecordOut]:
    fee_engine.reconcile_overdue()
    return fee_engine.member_dues(identity.member.id)
