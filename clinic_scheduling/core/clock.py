"""Time source used for past-date checks and audit timestamps."""

from datetime import UTC, date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Source of the current instant and the clinic's current date."""

    def now(self) -> datetime: ...

    def today(self) -> date: ...


class SystemClock:
    """Wall clock; "today" is evaluated in the clinic's timezone."""

    def __init__(self, timezone: str = "UTC"):
        self.tz = ZoneInfo(timezone)

    def now(self) -> datetime:
        return datetime.now(UTC)

    def today(self) -> date:
        return datetime.now(self.tz).date()


class FixedClock:
    """Clock frozen at a given instant. Used by tests and replays."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def today(self) -> date:
        return self.instant.date()

    def advance_to(self, instant: datetime) -> None:
        """Move the frozen instant."""
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        self.instant = instant
