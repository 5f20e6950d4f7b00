"""Batch model and its ordered trainer assignments."""

from datetime import timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TypeDecorator
from trainer_portal.database import Base


class UTCDateTime(TypeDecorator):
    """Stores naive UTC, always hands back timezone-aware UTC datetimes."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("UTCDateTime columns require timezone-aware datetimes")
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


class Batch(Base):
    __tablename__ = "batch"

    batch_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(80), nullable=False)
    start_at = Column(UTCDateTime, nullable=False)
    end_at = Column(UTCDateTime, nullable=False)
    is_cancelled = Column(Boolean, nullable=False, default=False)
    # Lab credentials are either all set or all null.
    login_url = Column(String(2048), nullable=True)
    lab_username = Column(String(200), nullable=True)
    lab_password = Column(String(200), nullable=True)
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    trainer_links = relationship(
        "BatchTrainer",
        back_populates="batch",
        order_by="BatchTrainer.position",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_batch_window", "start_at", "end_at"),
        Index("idx_batch_cancelled", "is_cancelled"),
    )

    @property
    def trainer_ids(self) -> list[int]:
        return [link.user_id for link in self.trainer_links]

    @property
    def trainers(self):
        return [link.trainer for link in self.trainer_links]

    @property
    def has_lab_credentials(self) -> bool:
        return bool(self.login_url and self.lab_username and self.lab_password)


class BatchTrainer(Base):
    __tablename__ = "batch_trainer"

    link_id = Column(Integer, primary_key=True, autoincrement=True)
    batch_id = Column(Integer, ForeignKey("batch.batch_id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    batch = relationship("Batch", back_populates="trainer_links")
    trainer = relationship("User")

    __table_args__ = (
        UniqueConstraint("batch_id", "user_id", name="uq_batch_trainer"),
        Index("idx_batch_trainer_user", "user_id"),
    )
