"""Projections of a batch for each audience.

Lab credentials appear only in the admin view and in the gated credential
response; the trainer view never carries them.
"""

from datetime import datetime
from typing import Callable, Union

from trainer_portal.models.batch import Batch
from trainer_portal.models.user import User
from trainer_portal.schemas.batch import (
    BatchAdminOut,
    BatchOut,
    CredentialsOut,
    LabCredentialsOut,
    TrainerSummary,
)
from trainer_portal.services.credential_service import CredentialDecision, CredentialOutcome
from trainer_portal.utils.permissions import is_admin
from trainer_portal.utils.time_window import classify, is_expiring_soon


def _common_fields(batch: Batch, now: datetime) -> dict:
    return {
        "id": batch.batch_id,
        "name": batch.name,
        "trainer_ids": batch.trainer_ids,
        "trainers": [
            TrainerSummary(id=trainer.user_id, name=trainer.full_name, email=trainer.email)
            for trainer in batch.trainers
        ],
        "start_at": batch.start_at,
        "end_at": batch.end_at,
        "status": classify(batch.start_at, batch.end_at, batch.is_cancelled, now).value,
        "is_cancelled": bool(batch.is_cancelled),
        "is_expiring_soon": is_expiring_soon(batch.start_at, batch.end_at, batch.is_cancelled, now),
        "has_lab_credentials": batch.has_lab_credentials,
        "created_by": batch.created_by,
        "created_at": batch.created_at,
        "updated_at": batch.updated_at,
    }


def _credentials_of(batch: Batch) -> LabCredentialsOut:
    return LabCredentialsOut(
        login_url=batch.login_url,
        username=batch.lab_username,
        password=batch.lab_password,
    )


def to_trainer_view(batch: Batch, now: datetime) -> BatchOut:
    return BatchOut(**_common_fields(batch, now))


def to_admin_view(batch: Batch, now: datetime) -> BatchAdminOut:
    credentials = _credentials_of(batch) if batch.has_lab_credentials else None
    return BatchAdminOut(**_common_fields(batch, now), lab_credentials=credentials)


def view_for(user: User) -> Callable[[Batch, datetime], Union[BatchOut, BatchAdminOut]]:
    return to_admin_view if is_admin(user) else to_trainer_view


def to_credential_response(decision: CredentialDecision) -> CredentialsOut:
    if decision.outcome == CredentialOutcome.NO_CREDENTIALS:
        return CredentialsOut(has_credentials=False, message=decision.message)
    if decision.outcome != CredentialOutcome.GRANTED:
        raise ValueError(f"no credential response for outcome {decision.outcome.value}")
    batch = decision.batch
    return CredentialsOut(
        has_credentials=True,
        credentials=_credentials_of(batch),
        batch_name=batch.name,
        end_at=batch.end_at,
    )
