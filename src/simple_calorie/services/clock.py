"""Time source used by the stores."""

from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo


@dataclass
class Clock:
    """Reports the current time in the configured timezone."""

    timezone_name: str = "UTC"

    def now(self) -> datetime:
        """Return the current aware datetime."""
        return datetime.now(tz=ZoneInfo(self.timezone_name))

    def today(self) -> date:
        """Return the current calendar date."""
        return self.now().date()
