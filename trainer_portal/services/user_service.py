"""User directory queries."""

from sqlalchemy.orm import Session

from trainer_portal.models.user import User
from trainer_portal.utils.permissions import TRAINER


def list_trainers(db: Session):
    return (
        db.query(User)
        .filter(User.role == TRAINER, User.is_active == True)  # noqa: E712
        .order_by(User.full_name.asc())
        .all()
    )
