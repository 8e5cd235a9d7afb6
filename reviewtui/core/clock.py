# reviewtui/core/clock.py
from datetime import datetime, timezone


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock that always returns the same instant, for tests."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


_clock = SystemClock()


def now() -> datetime:
    return _clock.now()


def set_clock(clock) -> None:
    global _clock
    _clock = clock if clock is not None else SystemClock()
