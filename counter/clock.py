"""Local time source and day-boundary detection."""

from datetime import datetime
from typing import Optional, Tuple

TimeOfDay = Tuple[int, int, int]

MIDNIGHT: TimeOfDay = (0, 0, 0)
NOON_HOUR = 12


class LocalClock:
    """Time service returning the local (hour, minute, second)."""

    def now(self) -> TimeOfDay:
        current = datetime.now()
        return current.hour, current.minute, current.second


class MidnightWatch:
    """
    Reports the first tick of a new day.

    A day starts when the clock reads 00:00:00, or when it wraps from the
    afternoon back into the morning because the midnight second itself was
    missed. Smaller backward steps (DST fall-back, clock corrections) stay in
    the same day. Several ticks within 00:00:00 report only once.
    """

    def __init__(self):
        self.previous: Optional[TimeOfDay] = None

    def crossed(self, now: TimeOfDay) -> bool:
        now = tuple(now)
        previous, self.previous = self.previous, now

        if now == MIDNIGHT:
            return previous != MIDNIGHT
        if previous is None or now >= previous:
            return False
        return previous[0] >= NOON_HOUR and now[0] < NOON_HOUR

    def reset(self) -> None:
        self.previous = None
