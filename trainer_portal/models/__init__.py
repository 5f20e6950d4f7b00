"""SQLAlchemy model package."""

from trainer_portal.models.user import User
from trainer_portal.models.batch import Batch, BatchTrainer

__all__ = [
    "User",
    "Batch", "BatchTrainer",
]
