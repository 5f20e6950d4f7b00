"""Batch request forms and response contracts.

The forms only check shape and per-field format; cross-field and database
rules live in ``services.batch_validation``.
"""

import re

from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import datetime, time

from trainer_portal.database import is_row_id
from trainer_portal.utils.time_window import combine, parse_date, parse_time

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^\d{2}:\d{2}$")


def _check_name(value: str) -> str:
    value = value.strip()
    if len(value) < 3:
        raise ValueError("Batch name must be at least 3 characters")
    if len(value) > 80:
        raise ValueError("Batch name must not exceed 80 characters")
    return value


def _check_trainer_ids(value: List[int]) -> List[int]:
    ordered = list(dict.fromkeys(value))
    if not ordered:
        raise ValueError("At least one trainer is required")
    if not all(is_row_id(trainer_id) for trainer_id in ordered):
        raise ValueError("Some selected trainers do not exist")
    return ordered


def _check_date(value: str) -> str:
    if not DATE_PATTERN.match(value):
        raise ValueError("Date must be in YYYY-MM-DD format")
    try:
        day = parse_date(value)
        combine(day, time.min)
        combine(day, time.max)
    except (ValueError, OverflowError):
        raise ValueError("Date must be a valid calendar date")
    return value


def _check_time(value: str, label: str) -> str:
    if not TIME_PATTERN.match(value):
        raise ValueError(f"{label} must be in HH:mm format")
    try:
        parse_time(value)
    except ValueError:
        raise ValueError(f"{label} must be a valid time of day")
    return value


class LabCredentialsForm(BaseModel):
    login_url: Optional[str] = ""
    username: Optional[str] = ""
    password: Optional[str] = ""


class BatchCreateForm(BaseModel):
    name: str
    trainer_ids: List[int]
    date: str
    start_time: str
    end_time: str
    lab_credentials: Optional[LabCredentialsForm] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _check_name(value)

    @field_validator("trainer_ids")
    @classmethod
    def check_trainer_ids(cls, value: List[int]) -> List[int]:
        return _check_trainer_ids(value)

    @field_validator("date")
    @classmethod
    def check_date(cls, value: str) -> str:
        return _check_date(value)

    @field_validator("start_time")
    @classmethod
    def check_start_time(cls, value: str) -> str:
        return _check_time(value, "Start time")

    @field_validator("end_time")
    @classmethod
    def check_end_time(cls, value: str) -> str:
        return _check_time(value, "End time")


class BatchUpdateForm(BaseModel):
    name: Optional[str] = None
    trainer_ids: Optional[List[int]] = None
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    lab_credentials: Optional[LabCredentialsForm] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_name(value)

    @field_validator("trainer_ids")
    @classmethod
    def check_trainer_ids(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        return None if value is None else _check_trainer_ids(value)

    @field_validator("date")
    @classmethod
    def check_date(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_date(value)

    @field_validator("start_time")
    @classmethod
    def check_start_time(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_time(value, "Start time")

    @field_validator("end_time")
    @classmethod
    def check_end_time(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_time(value, "End time")

    @property
    def touches_schedule(self) -> bool:
        return any(v is not None for v in (self.date, self.start_time, self.end_time))


class TrainerSummary(BaseModel):
    id: int
    name: str
    email: str


class LabCredentialsOut(BaseModel):
    login_url: str
    username: str
    password: str


class BatchOut(BaseModel):
    id: int
    name: str
    trainer_ids: List[int]
    trainers: List[TrainerSummary]
    start_at: datetime
    end_at: datetime
    status: str
    is_cancelled: bool
    is_expiring_soon: bool
    has_lab_credentials: bool
    created_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BatchAdminOut(BatchOut):
    lab_credentials: Optional[LabCredentialsOut] = None


class CredentialsOut(BaseModel):
    has_credentials: bool
    message: Optional[str] = None
    credentials: Optional[LabCredentialsOut] = None
    batch_name: Optional[str] = None
    end_at: Optional[datetime] = None
