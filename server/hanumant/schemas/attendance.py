from datetime import date, time
from typing import Optional

from pydantic import BaseModel


class AttendanceOut(BaseModel):
    id: int
    member_id: int
    member_name: str
    date: date
    entry_time: time
    exit_time: Optional[time]
    duration: Optional[int]

    class Config:
        from_attributes = True


class AttendanceEntryRequest(BaseModel):
    member_id: int


class CurrentSessionOut(BaseModel):
    checked_in: bool
    session: Optional[AttendanceOut] = None
