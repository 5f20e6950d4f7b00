"""Batches API router. Translates service results into HTTP responses."""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from trainer_portal.database import get_db
from trainer_portal.middleware.auth_middleware import get_current_user, require_roles
from trainer_portal.models.user import User
from trainer_portal.services import batch_service, batch_views, credential_service
from trainer_portal.services.batch_validation import ValidationResult
from trainer_portal.utils.clock import Clock, get_clock
from trainer_portal.utils.permissions import scope_for

router = APIRouter(prefix="/api/batches", tags=["batches"])

NOT_FOUND = "Batch not found"


def _rejection(result: ValidationResult) -> JSONResponse:
    code = status.HTTP_409_CONFLICT if result.is_conflict else status.HTTP_400_BAD_REQUEST
    return JSONResponse(
        status_code=code,
        content={"detail": result.message, "field_errors": result.errors},
    )


@router.get("")
def list_batches(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
):
    rows = batch_service.list_batches(db, scope_for(current_user))
    project = batch_views.view_for(current_user)
    now = clock.now()
    return [project(row, now) for row in rows]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_batch(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
    clock: Clock = Depends(get_clock),
):
    result = batch_service.create_batch(db, payload, current_user, clock)
    if not result.ok:
        return _rejection(result)
    return batch_views.to_admin_view(result.value, clock.now())


@router.get("/{batch_id}")
def get_batch(
    batch_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
):
    batch = batch_service.get_batch(db, batch_id, scope_for(current_user))
    if batch is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return batch_views.view_for(current_user)(batch, clock.now())


@router.put("/{batch_id}")
def update_batch(
    batch_id: int,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
    clock: Clock = Depends(get_clock),
):
    result = batch_service.update_batch(db, batch_id, payload, clock)
    if result is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    if not result.ok:
        return _rejection(result)
    return batch_views.to_admin_view(result.value, clock.now())


@router.patch("/{batch_id}/cancel")
def cancel_batch(
    batch_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
    clock: Clock = Depends(get_clock),
):
    batch = batch_service.cancel_batch(db, batch_id)
    if batch is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return batch_views.to_admin_view(batch, clock.now())


@router.delete("/{batch_id}")
def delete_batch(
    batch_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    if not batch_service.delete_batch(db, batch_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Batch deleted successfully"}


@router.get("/{batch_id}/credentials")
def get_lab_credentials(
    batch_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
):
    decision = credential_service.get_credentials(db, batch_id, current_user, clock)
    if decision.outcome == credential_service.CredentialOutcome.NOT_FOUND:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    if decision.is_denial:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"detail": decision.message, "reason": decision.outcome.value},
        )
    return batch_views.to_credential_response(decision)
