"""Accept/reject decisions for batch create and update requests.

Stages run in a fixed order and stop at the first stage that reports a
problem: guards on the stored batch, structure, referenced trainers, the
live-schedule freeze, time rules, then trainer overlap. Errors map a field
name (or ``general``) to a message and only the first message per field is
kept.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar

from pydantic import AnyUrl, TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from trainer_portal.models.batch import Batch
from trainer_portal.models.user import User
from trainer_portal.schemas.batch import BatchCreateForm, BatchUpdateForm, LabCredentialsForm
from trainer_portal.services.overlap_service import find_overlap
from trainer_portal.utils.clock import Clock
from trainer_portal.utils.permissions import TRAINER
from trainer_portal.utils.time_window import (
    MIN_BATCH_DURATION,
    BatchStatus,
    classify,
    combine,
    parse_date,
    parse_time,
    split,
)

logger = logging.getLogger(__name__)

FieldErrors = Dict[str, str]
GENERAL = "general"
T = TypeVar("T")

REQUIRED_MESSAGES = {
    "name": "Batch name is required",
    "trainer_ids": "At least one trainer is required",
    "date": "Date is required",
    "start_time": "Start time is required",
    "end_time": "End time is required",
}

EXPIRED_EDIT_MESSAGE = "This batch has ended and cannot be modified."
LIVE_RESCHEDULE_MESSAGE = (
    "You cannot change the schedule of a batch that is currently live. Please wait until it ends."
)

_URL_ADAPTER = TypeAdapter(AnyUrl)
_CREDENTIAL_FIELDS = ("login_url", "username", "password")


@dataclass(frozen=True)
class LabCredentials:
    login_url: str
    username: str
    password: str


@dataclass
class BatchDraft:
    name: str
    trainer_ids: List[int]
    start_at: datetime
    end_at: datetime
    lab_credentials: Optional[LabCredentials] = None


@dataclass
class BatchPatch:
    name: Optional[str] = None
    trainer_ids: Optional[List[int]] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    lab_credentials: Optional[LabCredentials] = None
    clear_lab_credentials: bool = False


@dataclass
class ValidationResult(Generic[T]):
    value: Optional[T] = None
    errors: FieldErrors = field(default_factory=dict)
    is_conflict: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def message(self) -> Optional[str]:
        if not self.errors:
            return None
        return self.errors.get(GENERAL) or next(iter(self.errors.values()))

    @classmethod
    def success(cls, value: T) -> "ValidationResult[T]":
        return cls(value=value)

    @classmethod
    def invalid(cls, errors: FieldErrors) -> "ValidationResult[T]":
        return cls(errors=dict(errors))

    @classmethod
    def conflict(cls, message: str) -> "ValidationResult[T]":
        return cls(errors={GENERAL: message}, is_conflict=True)


def _add_error(errors: FieldErrors, name: str, message: str) -> None:
    errors.setdefault(name, message)


def _form_errors(exc: ValidationError) -> FieldErrors:
    errors: FieldErrors = {}
    for err in exc.errors():
        loc = [str(part) for part in err["loc"]]
        if not loc:
            name = GENERAL
        elif loc[0] == "lab_credentials" and len(loc) > 1:
            name = ".".join(loc[:2])
        else:
            name = loc[0]

        if err["type"] == "missing":
            message = REQUIRED_MESSAGES.get(name, "This field is required")
        elif err["type"] == "value_error" and err.get("ctx", {}).get("error") is not None:
            message = str(err["ctx"]["error"])
        else:
            message = err["msg"]
        _add_error(errors, name, message)
    return errors


def _is_absolute_url(value: str) -> bool:
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return True


def _credential_errors(raw: Any) -> FieldErrors:
    # Runs on the raw payload so credential problems are reported next to form errors.
    if not isinstance(raw, Mapping):
        return {}
    values = {key: raw.get(key) for key in _CREDENTIAL_FIELDS}
    if any(value is not None and not isinstance(value, str) for value in values.values()):
        return {}
    login_url, username, password = ((values[key] or "").strip() for key in _CREDENTIAL_FIELDS)
    if not (login_url or username or password):
        return {}

    errors: FieldErrors = {}
    if not login_url:
        _add_error(errors, "lab_credentials.login_url", "Login URL is required")
    elif not _is_absolute_url(login_url):
        _add_error(errors, "lab_credentials.login_url", "Login URL must be a valid URL")
    if not username:
        _add_error(errors, "lab_credentials.username", "Username is required")
    if not password:
        _add_error(errors, "lab_credentials.password", "Password is required")
    return errors


def _structural_errors(form_cls, payload: Any):
    errors: FieldErrors = {}
    form = None
    try:
        form = form_cls.model_validate(payload)
    except ValidationError as exc:
        errors.update(_form_errors(exc))
    raw_credentials = payload.get("lab_credentials") if isinstance(payload, Mapping) else None
    for name, message in _credential_errors(raw_credentials).items():
        _add_error(errors, name, message)
    return form, errors


def _normalized_credentials(form: LabCredentialsForm) -> Optional[LabCredentials]:
    """Complete credentials, or None when every field was left empty."""
    login_url = (form.login_url or "").strip()
    username = (form.username or "").strip()
    password = form.password or ""
    if not (login_url and username and password.strip()):
        return None
    return LabCredentials(login_url=login_url, username=username, password=password)


def _trainer_errors(db: Session, trainer_ids: List[int]) -> FieldErrors:
    users = db.query(User).filter(User.user_id.in_(trainer_ids)).all()
    if len(users) != len(set(trainer_ids)):
        return {"trainer_ids": "Some selected trainers do not exist"}
    if any(user.role != TRAINER for user in users):
        return {"trainer_ids": "One or more selected users are not trainers"}
    return {}


def _time_errors(start_at: datetime, end_at: datetime, now: Optional[datetime]) -> FieldErrors:
    """``now`` is only given when the start must lie in the future."""
    errors: FieldErrors = {}
    if now is not None and start_at <= now:
        _add_error(errors, "start_time", "Batch start time must be in the future")
    if end_at <= start_at:
        _add_error(errors, "end_time", "End time must be after start time")
    if end_at - start_at < MIN_BATCH_DURATION:
        minutes = int(MIN_BATCH_DURATION.total_seconds() // 60)
        _add_error(errors, "end_time", f"Batch duration must be at least {minutes} minutes")
    return errors


def _rejected(kind: str, errors: FieldErrors) -> ValidationResult:
    logger.info("[batch-validation] %s rejected fields=%s", kind, sorted(errors))
    return ValidationResult.invalid(errors)


def validate_create(db: Session, payload: Any, clock: Clock) -> ValidationResult[BatchDraft]:
    form, errors = _structural_errors(BatchCreateForm, payload)
    if errors or form is None:
        return _rejected("create", errors)

    errors = _trainer_errors(db, form.trainer_ids)
    if errors:
        return _rejected("create", errors)

    day = parse_date(form.date)
    start_at = combine(day, parse_time(form.start_time))
    end_at = combine(day, parse_time(form.end_time))
    errors = _time_errors(start_at, end_at, now=clock.now())
    if errors:
        return _rejected("create", errors)

    overlap = find_overlap(db, form.trainer_ids, start_at, end_at)
    if overlap.conflict:
        return ValidationResult.conflict(overlap.message)

    credentials = _normalized_credentials(form.lab_credentials) if form.lab_credentials else None
    return ValidationResult.success(
        BatchDraft(
            name=form.name,
            trainer_ids=form.trainer_ids,
            start_at=start_at,
            end_at=end_at,
            lab_credentials=credentials,
        )
    )


def validate_update(db: Session, batch: Batch, payload: Any, clock: Clock) -> ValidationResult[BatchPatch]:
    if classify(batch.start_at, batch.end_at, False, clock.now()) == BatchStatus.EXPIRED:
        logger.info("[batch-validation] update of expired batch_id=%s refused", batch.batch_id)
        return ValidationResult.conflict(EXPIRED_EDIT_MESSAGE)

    form, errors = _structural_errors(BatchUpdateForm, payload)
    if errors or form is None:
        return _rejected("update", errors)

    patch = BatchPatch(name=form.name)
    if form.trainer_ids is not None:
        errors = _trainer_errors(db, form.trainer_ids)
        if errors:
            return _rejected("update", errors)
        patch.trainer_ids = form.trainer_ids

    if form.lab_credentials is not None:
        credentials = _normalized_credentials(form.lab_credentials)
        if credentials is None:
            patch.clear_lab_credentials = True
        else:
            patch.lab_credentials = credentials

    start_at, end_at = batch.start_at, batch.end_at
    rescheduled = False
    if form.touches_schedule:
        current_day, current_start = split(batch.start_at)
        _, current_end = split(batch.end_at)
        day = parse_date(form.date) if form.date else current_day
        start_at = combine(day, parse_time(form.start_time) if form.start_time else current_start)
        end_at = combine(day, parse_time(form.end_time) if form.end_time else current_end)
        rescheduled = start_at != batch.start_at or end_at != batch.end_at

    if rescheduled:
        if classify(batch.start_at, batch.end_at, batch.is_cancelled, clock.now()) == BatchStatus.LIVE:
            logger.info("[batch-validation] reschedule of live batch_id=%s refused", batch.batch_id)
            return ValidationResult.conflict(LIVE_RESCHEDULE_MESSAGE)
        errors = _time_errors(start_at, end_at, now=None)
        if errors:
            return _rejected("update", errors)
        patch.start_at, patch.end_at = start_at, end_at

    if not batch.is_cancelled and (rescheduled or patch.trainer_ids is not None):
        trainer_ids = patch.trainer_ids if patch.trainer_ids is not None else batch.trainer_ids
        overlap = find_overlap(db, trainer_ids, start_at, end_at, exclude_batch_id=batch.batch_id)
        if overlap.conflict:
            return ValidationResult.conflict(overlap.message)

    return ValidationResult.success(patch)
