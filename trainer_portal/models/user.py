"""User model: trainers and admins."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from trainer_portal.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(60), nullable=False)
    email = Column(String(254), unique=True, nullable=False)  # stored lowercase
    password_hash = Column(String(128), nullable=False)
    role = Column(String(20), nullable=False, default="trainer", index=True)  # trainer/admin
    is_active = Column(Boolean, default=True, index=True)
    refresh_token_hash = Column(String(64), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
