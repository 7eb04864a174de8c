from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from hanumant.auth.deps import get_member_registry, require_admin
from hanumant.auth.identity import Identity
from hanumant.schemas.member import MemberCreate, MemberOut, MemberUpdate
from hanumant.services.members import MemberRegistry

router = APIRouter(prefix="/members", tags=["members"])


@router.get("", response_model=list[MemberOut])
def list_members(
    *,
    status_filter: Optional[Literal["active", "inactive"]] = Query(default=None, alias="status"),
    q: Optional[str] = Query(default=None, max_length=100),
    registry: MemberRegistry = Depends(get_member_registry),
    _: Identity = Depends(require_admin),
) -> list[MemberOut]:
    return registry.list_members(status_filter=status_filter, search=q)


@router.post("", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def create_member(
    payload: MemberCreate,
    registry: MemberRegistry = Depends(get_member_registry),
    _: Identity = Depends(require_admin),
) -> MemberOut:
    return registry.create_member(payload)


@router.get("/{member_id}", response_model=MemberOut)
def get_member(
    member_id: int,
    registry: MemberRegistry = Depends(get_member_registry),
    _: Identity = Depends(require_admin),
) -> MemberOut:
    return registry.get_member(member_id)


@router.patch("/{member_id}", response_model=MemberOut)
def update_member(
    member_id: int,
    payload: MemberUpdate,
    registry: MemberRegistry = Depends(get_member_registry),
    _: Identity = Depends(require_admin),
) -> MemberOut:
    return registry.update_member(member_id, payload)


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_member(
    member_id: int,
    registry: MemberRegistry = Depends(get_member_registry),
    _: Identity = Depends(require_admin),
) -> None:
    registry.delete_member(member_id)
