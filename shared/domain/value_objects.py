"""
Common Value Objects

Value objects used across multiple domains:
- Money: Represents monetary amounts with currency
- TimeWindow: Represents a half-open interval of time (start inclusive, end exclusive)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a monetary amount with an ISO 4217 currency code.
    """
    amount: Decimal
    currency: str = 'usd'

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency or len(self.currency) != 3 or not self.currency.isalpha():
            raise ValueError(f"Unsupported currency: {self.currency!r}")
        object.__setattr__(self, 'currency', self.currency.lower())

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency.upper()}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class TimeWindow(ValueObject):
    """
    Time window value object

    Represents the range from start (inclusive) to end (exclusive).
    Used for slots and for the calendar events rendered from them.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start ({self.start}) must be before end ({self.end})")

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def __str__(self):
        return f"{self.start.isoformat()} - {self.end.isoformat()}"

    def __repr__(self):
        return f"TimeWindow({self.start!r}, {self.end!r})"
