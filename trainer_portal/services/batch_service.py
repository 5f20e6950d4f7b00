"""Batch lifecycle store: persistence and role-scoped reads for batches."""

import logging
from typing import Any, List, Optional

from sqlalchemy.orm import Session, selectinload

from trainer_portal.database import is_row_id
from trainer_portal.models.batch import Batch, BatchTrainer
from trainer_portal.models.user import User
from trainer_portal.services.batch_validation import (
    BatchDraft,
    BatchPatch,
    LabCredentials,
    ValidationResult,
    validate_create,
    validate_update,
)
from trainer_portal.utils.clock import Clock
from trainer_portal.utils.permissions import BatchScope

logger = logging.getLogger(__name__)


def _scoped_query(db: Session, scope: BatchScope):
    q = db.query(Batch).options(selectinload(Batch.trainer_links).selectinload(BatchTrainer.trainer))
    if not scope.is_unrestricted:
        q = q.filter(
            Batch.trainer_links.any(BatchTrainer.user_id == scope.owner_id)
        )
    return q


def _set_trainers(batch: Batch, trainer_ids: List[int]) -> None:
    batch.trainer_links = [
        BatchTrainer(user_id=int(trainer_id), position=position)
        for position, trainer_id in enumerate(trainer_ids)
    ]


def _set_credentials(batch: Batch, credentials: Optional[LabCredentials]) -> None:
    batch.login_url = credentials.login_url if credentials else None
    batch.lab_username = credentials.username if credentials else None
    batch.lab_password = credentials.password if credentials else None


def list_batches(db: Session, scope: BatchScope) -> List[Batch]:
    return _scoped_query(db, scope).order_by(Batch.start_at.asc(), Batch.batch_id.asc()).all()


def get_batch(db: Session, batch_id: int, scope: BatchScope = BatchScope.all()) -> Optional[Batch]:
    """A batch outside the caller's scope is reported exactly like a missing one."""
    if not is_row_id(batch_id):
        return None
    return _scoped_query(db, scope).filter(Batch.batch_id == int(batch_id)).first()


def insert_batch(db: Session, draft: BatchDraft, created_by: int) -> Batch:
    batch = Batch(
        name=draft.name,
        start_at=draft.start_at,
        end_at=draft.end_at,
        is_cancelled=False,
        created_by=created_by,
    )
    _set_trainers(batch, draft.trainer_ids)
    _set_credentials(batch, draft.lab_credentials)
    db.add(batch)
    db.commit()
    db.refresh(batch)
    return batch


def apply_patch(db: Session, batch: Batch, patch: BatchPatch) -> Batch:
    if patch.name is not None:
        batch.name = patch.name
    if patch.trainer_ids is not None and patch.trainer_ids != batch.trainer_ids:
        batch.trainer_links.clear()
        db.flush()
        _set_trainers(batch, patch.trainer_ids)
    if patch.start_at is not None and patch.end_at is not None:
        batch.start_at = patch.start_at
        batch.end_at = patch.end_at
    if patch.clear_lab_credentials:
        _set_credentials(batch, None)
    elif patch.lab_credentials is not None:
        _set_credentials(batch, patch.lab_credentials)
    db.commit()
    db.refresh(batch)
    return batch


def create_batch(db: Session, payload: Any, current_user: User, clock: Clock) -> ValidationResult[Batch]:
    result = validate_create(db, payload, clock)
    if not result.ok:
        return result
    batch = insert_batch(db, result.value, created_by=current_user.user_id)
    logger.info(
        "[batch] created batch_id=%s by user_id=%s trainers=%s",
        batch.batch_id,
        current_user.user_id,
        batch.trainer_ids,
    )
    return ValidationResult.success(batch)


def update_batch(db: Session, batch_id: int, payload: Any, clock: Clock) -> Optional[ValidationResult[Batch]]:
    """None when the batch does not exist."""
    batch = get_batch(db, batch_id)
    if batch is None:
        return None
    result = validate_update(db, batch, payload, clock)
    if not result.ok:
        return result
    batch = apply_patch(db, batch, result.value)
    logger.info("[batch] updated batch_id=%s", batch.batch_id)
    return ValidationResult.success(batch)


def cancel_batch(db: Session, batch_id: int) -> Optional[Batch]:
    """Soft, one-way cancellation. Cancelling twice is a no-op."""
    batch = get_batch(db, batch_id)
    if batch is None:
        return None
    if not batch.is_cancelled:
        batch.is_cancelled = True
        db.commit()
        db.refresh(batch)
        logger.info("[batch] cancelled batch_id=%s", batch.batch_id)
    return batch


def delete_batch(db: Session, batch_id: int) -> bool:
    if not is_row_id(batch_id):
        return False
    batch = db.query(Batch).filter(Batch.batch_id == int(batch_id)).first()
    if batch is None:
        return False
    db.delete(batch)
    db.commit()
    logger.info("[batch] deleted batch_id=%s", batch_id)
    return True
