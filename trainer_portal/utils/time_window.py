"""Pure helpers converting schedule input into instants and batch phases.

Dates and times typed by admins are always read in the fixed schedule offset
(``SCHEDULE_TZ``, UTC+05:30 by default), never in the server's or the
client's local zone. Every function here takes ``now`` explicitly.
"""

from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Tuple

from trainer_portal.config import settings

SCHEDULE_TZ = timezone(timedelta(minutes=settings.SCHEDULE_UTC_OFFSET_MINUTES))
MIN_BATCH_DURATION = timedelta(minutes=settings.MIN_BATCH_DURATION_MINUTES)
EXPIRING_SOON_WINDOW = timedelta(minutes=settings.EXPIRING_SOON_MINUTES)

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"


class BatchStatus(str, Enum):
    UPCOMING = "Upcoming"
    LIVE = "Live"
    EXPIRED = "Expired"
    CANCELLED = "Cancelled"


def parse_date(value: str) -> date:
    return datetime.strptime(value, DATE_FORMAT).date()


def parse_time(value: str) -> time:
    return datetime.strptime(value, TIME_FORMAT).time()


def combine(day: date, clock_time: time) -> datetime:
    """Interpret ``day`` + ``clock_time`` in the schedule offset, return a UTC instant."""
    local = datetime.combine(day, clock_time.replace(second=0, microsecond=0), tzinfo=SCHEDULE_TZ)
    return local.astimezone(timezone.utc)


def split(instant: datetime) -> Tuple[date, time]:
    """Inverse of ``combine``: the schedule-offset calendar date and wall time."""
    local = ensure_utc(instant).astimezone(SCHEDULE_TZ)
    return local.date(), local.time().replace(second=0, microsecond=0)


def ensure_utc(instant: datetime) -> datetime:
    # Naive values coming back from the database are UTC.
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def classify(start_at: datetime, end_at: datetime, is_cancelled: bool, now: datetime) -> BatchStatus:
    if is_cancelled:
        return BatchStatus.CANCELLED
    start_at, end_at, now = ensure_utc(start_at), ensure_utc(end_at), ensure_utc(now)
    if now < start_at:
        return BatchStatus.UPCOMING
    if now <= end_at:
        return BatchStatus.LIVE
    return BatchStatus.EXPIRED


def is_expiring_soon(
    start_at: datetime,
    end_at: datetime,
    is_cancelled: bool,
    now: datetime,
    window: timedelta = EXPIRING_SOON_WINDOW,
) -> bool:
    if classify(start_at, end_at, is_cancelled, now) != BatchStatus.LIVE:
        return False
    return ensure_utc(end_at) <= ensure_utc(now) + window
