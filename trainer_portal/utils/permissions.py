"""Role constants and the batch visibility scope."""

from dataclasses import dataclass
from typing import Optional

from trainer_portal.models.user import User


ADMIN = "admin"
TRAINER = "trainer"


def is_admin(user: User) -> bool:
    return user.role == ADMIN


def is_trainer(user: User) -> bool:
    return user.role == TRAINER


@dataclass(frozen=True)
class BatchScope:
    """Which batches a caller may see: every batch, or those assigned to one trainer."""

    owner_id: Optional[int] = None

    @classmethod
    def all(cls) -> "BatchScope":
        return cls()

    @classmethod
    def owned_by(cls, user_id: int) -> "BatchScope":
        return cls(owner_id=int(user_id))

    @property
    def is_unrestricted(self) -> bool:
        return self.owner_id is None


def scope_for(user: User) -> BatchScope:
    if is_admin(user):
        return BatchScope.all()
    return BatchScope.owned_by(user.user_id)
