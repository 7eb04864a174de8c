from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

ActivityTypeLiteral = Literal["entry", "exit", "payment", "member_added", "member_removed"]


class ActivityOut(BaseModel):
    id: int
    type: ActivityTypeLiteral
    member_id: int
    member_name: str
    timestamp: datetime
    details: Optional[str]

    class Config:
        from_attributes = True
