import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo

from config import get_settings

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})")


def days_in_month(year: int, month: int) -> int:
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    return (next_month - date(year, month, 1)).days


def clamp_day(year: int, month: int, day: int) -> date:
    """Return ``year-month-day``, snapping to the month's last day on overflow."""
    dim = days_in_month(year, month)
    return date(year, month, min(max(day, 1), dim))


def days_between(start: date, end: date) -> int:
    return (end - start).days


@dataclass(frozen=True, order=True)
class MonthKey:
    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid month: {self.month}")

    @classmethod
    def of(cls, value: Union[date, datetime]) -> "MonthKey":
        return cls(value.year, value.month)

    @classmethod
    def parse(cls, raw: str) -> "MonthKey":
        # Accepts "YYYY-MM" as well as full ISO dates and timestamps.
        match = _MONTH_RE.match(raw.strip())
        if not match:
            raise ValueError(f"Invalid month marker: {raw!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        return date(self.year, self.month, days_in_month(self.year, self.month))

    def next(self) -> "MonthKey":
        if self.month == 12:
            return MonthKey(self.year + 1, 1)
        return MonthKey(self.year, self.month + 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def days_remaining_in_month(today: date) -> int:
    """Days left in ``today``'s month, counting today itself."""
    return max(1, days_between(today, MonthKey.of(today).end) + 1)


class SystemClock:
    def __init__(self, timezone: Optional[str] = None) -> None:
        self.tz = ZoneInfo(timezone or get_settings().timezone)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()
