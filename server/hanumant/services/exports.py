from __future__ import annotations

import csv
import io
from datetime import date, datetime
from typing import Iterable

from fastapi.responses import StreamingResponse

from hanumant.models.attendance import AttendanceRecord
from hanumant.models.fee import FeeRecord

ATTENDANCE_EXPORT_HEADERS = ["Date", "Member", "Entry Time", "Exit Time", "Duration"]
FEE_EXPORT_HEADERS = ["Receipt No", "Member Name", "Period", "Amount", "Paid Date"]
OPEN_SESSION_LABEL = "In Library"


def format_day(value: date | datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%d %b %Y")


def format_duration(minutes: int | None) -> str:
    if minutes is None:
        return "-"
    hours, remainder = divmod(minutes, 60)
    return f"{hours}h {remainder}m"


def format_period(start: date, end: date) -> str:
    return f"{start:%d %b} - {end:%d %b %Y}"


def format_amount(amount: int) -> str:
    return f"Rs. {amount:,}"


def attendance_row(record: AttendanceRecord) -> list[str]:
    return [
        format_day(record.date),
        record.member_name,
        record.entry_time.strftime("%H:%M:%S"),
        record.exit_time.strftime("%H:%M:%S") if record.exit_time else OPEN_SESSION_LABEL,
        format_duration(record.duration),
    ]


def fee_row(record: FeeRecord) -> list[str]:
    return [
        record.receipt_number or "",
        record.member_name,
        format_period(record.period_start, record.period_end),
        format_amount(record.amount),
        format_day(record.paid_date),
    ]


def stream_csv(headers: list[str], rows: Iterable[list[str]]) -> Iterable[str]:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    yield buffer.getvalue()
    buffer.seek(0)
    buffer.truncate(0)
    for row in rows:
        writer.writerow(row)
        yield buffer.getvalue()
        buffer.seek(0)
        buffer.truncate(0)


def csv_response(headers: list[str], rows: Iterable[list[str]], filename: str) -> StreamingResponse:
    response = StreamingResponse(stream_csv(headers, rows), media_type="text/csv")
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    return response


def attendance_csv(records: Iterable[AttendanceRecord], label: str) -> StreamingResponse:
    """``label`` is the exported day (yyyy-mm-dd) or month (yyyy-mm)."""
    rows = (attendance_row(record) for record in records)
    return csv_response(ATTENDANCE_EXPORT_HEADERS, rows, f"attendance_{label}.csv")


def fee_transactions_csv(records: Iterable[FeeRecord], window: str, today: date) -> StreamingResponse:
    rows = (fee_row(record) for record in records)
    return csv_response(FEE_EXPORT_HEADERS, rows, f"fee_transactions_{window}_{today.isoformat()}.csv")
