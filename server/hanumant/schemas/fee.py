from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

FeeStatusLiteral = Literal["pending", "overdue", "paid"]
ExportWindowLiteral = Literal["daily", "weekly", "monthly", "yearly"]


class FeeRecordOut(BaseModel):
    id: int
    member_id: int
    member_name: str
    period_start: date
    period_end: date
    amount: int
    due_date: date
    status: FeeStatusLiteral
    paid_date: Optional[datetime]
    receipt_number: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class MarkPaidRequest(BaseModel):
    next_amount: Optional[int] = Field(None, gt=0)


class ManualPaymentCreate(BaseModel):
    member_id: int
    period_start: date
    period_end: date
    amount: int = Field(..., gt=0)
    payment_date: Optional[date] = None
    confirmation_code: str = Field(..., min_length=1, max_length=16)


class ReconcileResult(BaseModel):
    updated: int
