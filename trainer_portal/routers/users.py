"""Users API router."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from trainer_portal.database import get_db
from trainer_portal.middleware.auth_middleware import require_roles
from trainer_portal.models.user import User
from trainer_portal.schemas.user import TrainerOut
from trainer_portal.services import user_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/trainers", response_model=List[TrainerOut])
def list_trainers(
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_roles("admin")),
):
    return user_service.list_trainers(db)
