"""Pydantic schemas for users and authentication."""

import re

from pydantic import BaseModel, EmailStr, field_validator
from typing import Literal, Optional
from datetime import datetime

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]+$")


class UserOut(BaseModel):
    user_id: int
    full_name: str
    email: str
    role: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TrainerOut(BaseModel):
    user_id: int
    full_name: str
    email: str

    model_config = {"from_attributes": True}


class RegisterRequest(BaseModel):
    full_name: str
    email: EmailStr
    password: str
    role: Literal["trainer", "admin"] = "trainer"
    admin_invite_code: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def check_full_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 3:
            raise ValueError("Full name must be at least 3 characters")
        if len(value) > 60:
            raise ValueError("Full name must not exceed 60 characters")
        return value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if len(value) < 10:
            raise ValueError("Password must be at least 10 characters")
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Password must not exceed 72 bytes")
        if not PASSWORD_PATTERN.match(value):
            raise ValueError("Password must include uppercase, lowercase, number, and special character")
        return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserOut
