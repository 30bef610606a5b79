"""
Common Value Objects

Value objects used across multiple domains:
- DateRange: Represents a stay (check-in to check-out) or a blocked period
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from shared.domain.base import ValueObject

# date.weekday(): Friday and Saturday nights are charged at the weekend rate
WEEKEND_NIGHTS = (4, 5)


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    Used for booking periods and stay pricing.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    def nights(self) -> Iterator[date]:
        """Yield the date of every night in the range."""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    def weekend_nights(self) -> int:
        return sum(1 for night in self.nights() if night.weekday() in WEEKEND_NIGHTS)

    def __len__(self) -> int:
        """Number of nights in the range."""
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.strftime('%d.%m.%Y')} - {self.end_date.strftime('%d.%m.%Y')}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
