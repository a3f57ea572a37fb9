"""Calendar arithmetic in the application's configured timezone."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo

from foodlens.config import resolve_timezone


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class AppClock:
    """Single source of "now" and "today" for the whole process."""

    timezone: ZoneInfo
    now_source: Callable[[], datetime] = _utc_now

    @classmethod
    def from_name(cls, timezone_name: str) -> "AppClock":
        """Create a clock for a named IANA timezone."""
        return cls(timezone=resolve_timezone(timezone_name))

    def now(self) -> datetime:
        """Return the current moment in local time."""
        return self.now_source().astimezone(self.timezone)

    def today(self) -> date:
        """Return today's local calendar date."""
        return self.now().date()

    def date_key(self, day: date | None = None) -> str:
        """Return a date as YYYY-MM-DD, defaulting to today."""
        return (day or self.today()).isoformat()

    def start_of_day(self, day: date) -> datetime:
        """Return local midnight at the start of a date."""
        return datetime.combine(day, time.min, tzinfo=self.timezone)

    def start_of_today(self) -> datetime:
        """Return local midnight at the start of today."""
        return self.start_of_day(self.today())

    def local_day(self, moment: datetime) -> date:
        """Return the local calendar date of a moment."""
        return moment.astimezone(self.timezone).date()

    def day_gap(self, earlier: datetime, later: datetime) -> int:
        """Return whole local calendar days between two moments."""
        return (self.local_day(later) - self.local_day(earlier)).days
