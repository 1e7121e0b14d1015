"""Dates as stored by EU4.

The game writes dates in two forms: a ``yyyy.mm.dd`` tuple in text saves and,
in binary saves, an integer counting hours since midnight, 1 January 5000 BCE.
Every year has exactly 365 days; leap years do not exist in this calendar.
"""

from dataclasses import dataclass

YEAR_OFFSET = -5000
HOURS_PER_DAY = 24
DAYS_PER_YEAR = 365
HOURS_PER_YEAR = HOURS_PER_DAY * DAYS_PER_YEAR

# Days elapsed before the first day of each month
MONTH_OFFSETS = (0, 31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334)


@dataclass(frozen=True, order=True)
class EU4Date:
    """A calendar date with an hour, in the game's non-leap calendar."""
    year: int = YEAR_OFFSET
    month: int = 1
    day: int = 1
    hour: int = 0

    def __str__(self) -> str:
        return f"{self.year}.{self.month}.{self.day}"

    @classmethod
    def from_int(cls, hours: int) -> "EU4Date":
        return decode(hours)

    def to_int(self) -> int:
        return encode(self)


STARTING_DATE = EU4Date(1444, 11, 11)


def _month_from_day(day_of_year: int) -> int:
    for month, offset in enumerate(MONTH_OFFSETS):
        if day_of_year <= offset:
            return month
    return len(MONTH_OFFSETS)


def decode(hours: int) -> EU4Date:
    """Convert a packed hour count into a date.

    Args:
        hours: Hours since 5000 BCE-01-01 00:00

    Returns:
        The corresponding EU4Date
    """
    year = hours // HOURS_PER_YEAR + YEAR_OFFSET
    remainder = hours % HOURS_PER_YEAR
    day_of_year = remainder // HOURS_PER_DAY + 1
    month = _month_from_day(day_of_year)

    return EU4Date(
        year=year,
        month=month,
        day=day_of_year - MONTH_OFFSETS[month - 1],
        hour=remainder % HOURS_PER_DAY,
    )


def encode(date: EU4Date) -> int:
    """Convert a date into its packed hour count (inverse of decode)."""
    days = (
        (date.year - YEAR_OFFSET) * DAYS_PER_YEAR
        + MONTH_OFFSETS[date.month - 1]
        + date.day - 1
    )
    return days * HOURS_PER_DAY + date.hour
