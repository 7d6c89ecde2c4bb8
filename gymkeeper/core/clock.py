"""
Clock abstraction

Every "today" in the system (membership expiry, attendance day, revenue
month) is read from a Clock so that the reference timezone is applied in a
single place and tests can pin the date.
"""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from gymkeeper.core.config import get_settings


def _resolve_zone(name: str):
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


class Clock:
    """Wall clock in the configured reference timezone"""

    def __init__(self, tz_name: str = "UTC"):
        self.tz_name = tz_name
        self.tz = _resolve_zone(tz_name)

    def now(self) -> datetime:
        """Timezone-aware current time in the reference timezone"""
        return datetime.now(self.tz)

    def local_now(self) -> datetime:
        """Naive wall time in the reference timezone, as stored in the database"""
        return self.now().replace(tzinfo=None)

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    """Clock pinned to a given instant"""

    def __init__(self, moment: datetime, tz_name: str = "UTC"):
        super().__init__(tz_name)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=self.tz)
        self.moment = moment

    def now(self) -> datetime:
        return self.moment.astimezone(self.tz)

    def advance_to(self, moment: datetime) -> None:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=self.tz)
        self.moment = moment


_clock: Optional[Clock] = None


def get_clock() -> Clock:
    """Dependency returning the process clock"""
    global _clock
    if _clock is None:
        _clock = Clock(get_settings().TIMEZONE)
    return _clock
