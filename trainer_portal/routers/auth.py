"""Auth API router: register, login, token refresh, logout and profile."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from trainer_portal.database import get_db
from trainer_portal.schemas.user import LoginRequest, RefreshRequest, RegisterRequest, TokenResponse, UserOut
from trainer_portal.services import auth_service
from trainer_portal.middleware.auth_middleware import get_current_user
from trainer_portal.models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _token_response(db: Session, user: User) -> TokenResponse:
    access_token, refresh_token = auth_service.issue_tokens(db, user)
    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserOut.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    user = auth_service.register_user(db, request)
    return _token_response(db, user)


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, request.email, request.password)
    return _token_response(db, user)


@router.post("/refresh", response_model=TokenResponse)
def refresh(request: RefreshRequest, db: Session = Depends(get_db)):
    user, access_token, refresh_token = auth_service.rotate_refresh_token(db, request.refresh_token)
    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserOut.model_validate(user),
    )


@router.post("/logout")
def logout(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    auth_service.revoke_refresh_token(db, current_user)
    return {"message": "Logout successful"}


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
