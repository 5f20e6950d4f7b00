"""Trainer double-booking detection."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from trainer_portal.models.batch import Batch, BatchTrainer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverlapResult:
    conflict: bool
    conflicting_batch_id: Optional[int] = None
    conflicting_trainer_names: List[str] = field(default_factory=list)

    @property
    def message(self) -> Optional[str]:
        if not self.conflict:
            return None
        names = ", ".join(self.conflicting_trainer_names) or "One of the selected trainers"
        return f"{names} already has a batch scheduled during this time"


def find_overlap(
    db: Session,
    trainer_ids: Iterable[int],
    start_at: datetime,
    end_at: datetime,
    exclude_batch_id: Optional[int] = None,
) -> OverlapResult:
    """Look for a non-cancelled batch sharing a trainer whose [start, end) meets the candidate's.

    Intervals are closed at the start and open at the end, so a batch ending
    at 10:00 leaves 10:00 free for the next one.
    """
    ids = list(dict.fromkeys(int(trainer_id) for trainer_id in trainer_ids))
    if not ids:
        return OverlapResult(conflict=False)

    q = (
        db.query(Batch)
        .join(BatchTrainer, BatchTrainer.batch_id == Batch.batch_id)
        .filter(
            BatchTrainer.user_id.in_(ids),
            Batch.is_cancelled == False,  # noqa: E712
            Batch.start_at < end_at,
            Batch.end_at > start_at,
        )
    )
    if exclude_batch_id is not None:
        q = q.filter(Batch.batch_id != int(exclude_batch_id))

    existing = q.order_by(Batch.start_at.asc()).first()
    if existing is None:
        return OverlapResult(conflict=False)

    wanted = set(ids)
    names = [link.trainer.full_name for link in existing.trainer_links if link.user_id in wanted]
    logger.info(
        "[overlap] candidate %s-%s conflicts with batch_id=%s for trainers=%s",
        start_at.isoformat(),
        end_at.isoformat(),
        existing.batch_id,
        sorted(wanted & set(existing.trainer_ids)),
    )
    return OverlapResult(
        conflict=True,
        conflicting_batch_id=existing.batch_id,
        conflicting_trainer_names=names,
    )
