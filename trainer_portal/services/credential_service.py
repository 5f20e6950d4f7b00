"""Credential gate: releases a batch's lab credentials only while it is live.

The phase is recomputed from the stored window and the server clock on every
call. Nothing the client sends about the batch status is consulted.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from trainer_portal.database import is_row_id
from trainer_portal.models.batch import Batch
from trainer_portal.models.user import User
from trainer_portal.utils.clock import Clock
from trainer_portal.utils.permissions import is_trainer
from trainer_portal.utils.time_window import BatchStatus, classify

logger = logging.getLogger(__name__)


class CredentialOutcome(str, Enum):
    GRANTED = "granted"
    NO_CREDENTIALS = "no_credentials"
    NOT_FOUND = "not_found"
    NOT_ASSIGNED = "not_assigned"
    CANCELLED = "cancelled"
    NOT_YET_AVAILABLE = "not_yet_available"
    EXPIRED = "expired"


OUTCOME_MESSAGES = {
    CredentialOutcome.NO_CREDENTIALS: "No lab credentials configured for this batch.",
    CredentialOutcome.NOT_FOUND: "Batch not found",
    CredentialOutcome.NOT_ASSIGNED: "Access denied. You are not assigned to this batch.",
    CredentialOutcome.CANCELLED: "This batch has been cancelled.",
    CredentialOutcome.NOT_YET_AVAILABLE: "Lab access is not available yet. Please wait until the batch starts.",
    CredentialOutcome.EXPIRED: "Lab access has expired. The batch has ended.",
}

DENIALS = {
    CredentialOutcome.NOT_ASSIGNED,
    CredentialOutcome.CANCELLED,
    CredentialOutcome.NOT_YET_AVAILABLE,
    CredentialOutcome.EXPIRED,
}


@dataclass(frozen=True)
class CredentialDecision:
    outcome: CredentialOutcome
    batch: Optional[Batch] = None

    @property
    def is_denial(self) -> bool:
        return self.outcome in DENIALS

    @property
    def message(self) -> Optional[str]:
        return OUTCOME_MESSAGES.get(self.outcome)


def get_credentials(db: Session, batch_id: int, requester: User, clock: Clock) -> CredentialDecision:
    if not is_row_id(batch_id):
        return CredentialDecision(CredentialOutcome.NOT_FOUND)
    batch = db.query(Batch).filter(Batch.batch_id == int(batch_id)).first()
    if batch is None:
        return CredentialDecision(CredentialOutcome.NOT_FOUND)

    if is_trainer(requester) and requester.user_id not in batch.trainer_ids:
        return _deny(CredentialOutcome.NOT_ASSIGNED, batch, requester)

    if batch.is_cancelled:
        return _deny(CredentialOutcome.CANCELLED, batch, requester)

    phase = classify(batch.start_at, batch.end_at, batch.is_cancelled, clock.now())
    if phase == BatchStatus.UPCOMING:
        return _deny(CredentialOutcome.NOT_YET_AVAILABLE, batch, requester)
    if phase == BatchStatus.EXPIRED:
        return _deny(CredentialOutcome.EXPIRED, batch, requester)

    if not batch.has_lab_credentials:
        return CredentialDecision(CredentialOutcome.NO_CREDENTIALS, batch)

    logger.info("[credentials] released batch_id=%s to user_id=%s", batch.batch_id, requester.user_id)
    return CredentialDecision(CredentialOutcome.GRANTED, batch)


def _deny(outcome: CredentialOutcome, batch: Batch, requester: User) -> CredentialDecision:
    logger.info(
        "[credentials] denied batch_id=%s user_id=%s reason=%s",
        batch.batch_id,
        requester.user_id,
        outcome.value,
    )
    return CredentialDecision(outcome, batch)
