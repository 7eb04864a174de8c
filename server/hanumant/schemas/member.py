from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from hanumant.core.config import settings

MemberStatusLiteral = Literal["active", "inactive"]


class MemberBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=25)
    address: Optional[str] = Field(None, max_length=255)
    seat_number: Optional[str] = Field(None, max_length=20)
    locker_number: Optional[str] = Field(None, max_length=20)
    shift: Optional[str] = Field(None, max_length=30)
    monthly_fee: int = Field(settings.DEFAULT_MONTHLY_FEE, gt=0)
    status: MemberStatusLiteral = "active"


class MemberCreate(MemberBase):
    join_date: Optional[date] = None
    password: str = Field(..., min_length=1, max_length=128)


class MemberUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1, max_length=25)
    address: Optional[str] = Field(None, max_length=255)
    join_date: Optional[date] = None
    seat_number: Optional[str] = Field(None, max_length=20)
    locker_number: Optional[str] = Field(None, max_length=20)
    shift: Optional[str] = Field(None, max_length=30)
    monthly_fee: Optional[int] = Field(None, gt=0)
    status: Optional[MemberStatusLiteral] = None
    password: Optional[str] = Field(None, min_length=1, max_length=128)


class MemberOut(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    address: Optional[str]
    join_date: date
    seat_number: Optional[str]
    locker_number: Optional[str]
    shift: Optional[str]
    monthly_fee: int
    status: MemberStatusLiteral
    profile_pic: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class ProfilePicUpdate(BaseModel):
    profile_pic: Optional[str] = None


class ChatContact(BaseModel):
    id: int
    name: str
    profile_pic: Optional[str]
    room_id: str
