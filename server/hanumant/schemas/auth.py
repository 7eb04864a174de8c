from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Literal["admin", "user"]


class WhoAmIResponse(BaseModel):
    uid: str
    role: Literal["admin", "user"]
    display_name: str
    member_id: Optional[int] = None


class PasswordResetRequest(BaseModel):
    member_id: int


class PasswordResetIssued(BaseModel):
    token: str
    expires_at: datetime
    email_sent: bool


class PasswordResetComplete(BaseModel):
    password: str = Field(..., min_length=1, max_length=128)
