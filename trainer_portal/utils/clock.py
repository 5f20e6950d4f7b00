"""Injectable time source.

Every lifecycle decision asks a ``Clock`` for the current instant at the
moment it needs it. Routers receive the clock through the ``get_clock``
dependency so tests can swap in a ``FrozenClock``.
"""

from datetime import datetime, timedelta, timezone


class Clock:
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock(Clock):
    """Clock pinned to a fixed instant, moved explicitly with ``set``/``advance``."""

    def __init__(self, instant: datetime):
        self.set(instant)

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("FrozenClock requires a timezone-aware datetime")
        self._instant = instant.astimezone(timezone.utc)

    def advance(self, delta: timedelta) -> None:
        self._instant = self._instant + delta

    def now(self) -> datetime:
        return self._instant


_system_clock = SystemClock()


def get_clock() -> Clock:
    return _system_clock
