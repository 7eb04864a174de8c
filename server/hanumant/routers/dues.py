import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from hanumant.auth.deps import get_fee_engine, get_member_registry, require_admin
from hanumant.auth.identity import Identity
from hanumant.core.config import settings
from hanumant.schemas.fee import (
    ExportWindowLiteral,
    FeeRecordOut,
    ManualPaymentCreate,
    MarkPaidRequest,
    ReconcileResult,
)
from hanumant.services.exports import fee_transactions_csv
from hanumant.services.fee_cycle import FeeCycleEngine, export_window_start
from hanumant.services.members import MemberRegistry

router = APIRouter(prefix="/dues", tags=["dues"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[FeeRecordOut])
def list_dues(
    fee_engine: FeeCycleEngine = Depends(get_fee_engine),
    _: Identity = Depends(require_admin),
) -> list[FeeRecordOut]:
    fee_engine.reconcile_overdue()
    return fee_engine.all_dues()


@router.get("/pending", response_model=list[FeeRecordOut])
def pending_dues(
    fee_engine: FeeCycleEngine = Depends(get_fee_engine),
    _: Identity = Depends(require_admin),
) -> list[FeeRecordOut]:
    fee_engine.reconcile_overdue()
    return fee_engine.pending_dues()


@router.get("/receipts", response_model=list[FeeRecordOut])
def receipts(
    fee_engine: FeeCycleEngine = Depends(get_fee_engine),
    _: Identity = Depends(require_admin),
) -> list[FeeRecordOut]:
    return fee_engine.receipts()


@router.get("/member/{member_id}", response_model=list[FeeRecordOut])
def member_dues(
    member_id: int,
    fee_engine: FeeCycleEngine = Depends(get_fee_engine),
    _: Identity = Depends(require_admin),
) -> list[FeeRecordOut]:
    fee_engine.reconcile_overdue()
    return fee_engine.member_dues(member_id)


@router.post("/reconcile", response_model=ReconcileResult)
def reconcile(
    fee_engine: FeeCycleEngine = Depends(get_fee_engine),
    _: Identity = Depends(require_admin),
) -> ReconcileResult:
    return ReconcileResult(updated=fee_engine.reconcile_overdue())


@router.post("/{due_id}/pay", response_model=FeeRecordOut)
def mark_as_paid(
    due_id: int,
    payload: MarkPaidRequest | None = None,
    fee_engine: FeeCycleEngine = Depends(get_fee_engine),
    _: Identity = Depends(require_admin),
) -> FeeRecordOut:
    next_amount = payload.next_amount if payload else None
    return fee_engine.mark_as_paid(due_id, next_amount=next_amount)


@router.post("/manual", response_model=FeeRecordOut, status_code=status.HTTP_201_CREATED)
def record_manual_payment(
    payload: ManualPaymentCreate,
    fee_engine: FeeCycleEngine = Depends(get_fee_engine),
    registry: MemberRegistry = Depends(get_member_registry),
    admin: Identity = Depends(require_admin),
) -> FeeRecordOut:
    if payload.confirmation_code != settings.PAYMENT_CONFIRMATION_CODE:
        logger.info("manual_payment_code_rejected", extra={"admin_uid": admin.uid, "member_id": payload.member_id})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid confirmation code")
    member = registry.get_member(payload.member_id)
    return fee_engine.record_payment(
        member_id=member.id,
        member_name=member.name,
        period_start=payload.period_start,
        period_end=payload.period_end,
        amount=payload.amount,
        payment_date=payload.payment_date,
        chain_next=False,
    )


@router.delete("/{due_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_payment(
    due_id: int,
    fee_engine: FeeCycleEngine = Depends(get_fee_engine),
    _: Identity = Depends(require_admin),
) -> None:
    fee_engine.delete_payment(due_id)


@router.get("/export.csv")
def export_transactions(
    *,
    period: ExportWindowLiteral = Query("monthly"),
    fee_engine: FeeCycleEngine = Depends(get_fee_engine),
    _: Identity = Depends(require_admin),
) -> StreamingResponse:
    now = fee_engine.clock.now()
    records = fee_engine.paid_since(export_window_start(period, now))
    return fee_transactions_csv(records, period, now.date())
