"""Registration, login and JWT issuance for the identity collaborator."""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Tuple

from fastapi import HTTPException, status
from jose import JWTError, jwt
from sqlalchemy import func
from sqlalchemy.orm import Session

from trainer_portal.config import settings
from trainer_portal.models.user import User
from trainer_portal.schemas.user import RegisterRequest
from trainer_portal.utils.permissions import ADMIN
from trainer_portal.utils.security import fingerprint_token, hash_password, verify_password

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS = "access"
REFRESH = "refresh"


def _encode(payload: dict, secret: str, minutes: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {**payload, "iat": now, "exp": now + timedelta(minutes=minutes)}
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def create_access_token(user: User) -> str:
    return _encode(
        {"sub": str(user.user_id), "role": user.role, "type": ACCESS},
        settings.SECRET_KEY,
        settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )


def create_refresh_token(user: User) -> str:
    return _encode(
        {"sub": str(user.user_id), "type": REFRESH, "jti": uuid.uuid4().hex},
        settings.REFRESH_SECRET_KEY,
        settings.REFRESH_TOKEN_EXPIRE_MINUTES,
    )


def decode_refresh_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.REFRESH_SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    if payload.get("type") != REFRESH or payload.get("sub") is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    return payload


def find_user_by_email(db: Session, email: str):
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def register_user(db: Session, data: RegisterRequest) -> User:
    if find_user_by_email(db, data.email):
        raise HTTPException(status_code=400, detail="Email already exists")

    if data.role == ADMIN:
        if not settings.ADMIN_INVITE_CODE or data.admin_invite_code != settings.ADMIN_INVITE_CODE:
            logger.warning("[auth] admin registration refused for %s", data.email)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid admin invite code")

    user = User(
        full_name=data.full_name,
        email=data.email.lower(),
        password_hash=hash_password(data.password),
        role=data.role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("[auth] registered user_id=%s role=%s", user.user_id, user.role)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = find_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated. Please contact support.",
        )
    return user


def issue_tokens(db: Session, user: User) -> Tuple[str, str]:
    access_token = create_access_token(user)
    refresh_token = create_refresh_token(user)
    user.refresh_token_hash = fingerprint_token(refresh_token)
    db.commit()
    db.refresh(user)
    return access_token, refresh_token


def rotate_refresh_token(db: Session, token: str) -> Tuple[User, str, str]:
    payload = decode_refresh_token(token)
    user = db.query(User).filter(User.user_id == int(payload["sub"])).first()
    if not user or not user.is_active or user.refresh_token_hash != fingerprint_token(token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    access_token, refresh_token = issue_tokens(db, user)
    return user, access_token, refresh_token


def revoke_refresh_token(db: Session, user: User) -> None:
    user.refresh_token_hash = None
    db.commit()
