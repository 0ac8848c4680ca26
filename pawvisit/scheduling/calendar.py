"""Date arithmetic helpers and the injectable clock."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Protocol

from pawvisit.errors import ValidationError

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def weekday_name(value: dt.date) -> str:
    """Lowercase English weekday name, matching shelter hours keys."""
    return WEEKDAY_NAMES[value.weekday()]


def date_range(start: dt.date, end: dt.date) -> list[dt.date]:
    """Every date from ``start`` to ``end`` inclusive. Empty when start > end."""
    days = (end - start).days
    return [start + dt.timedelta(days=offset) for offset in range(days + 1)]


def week_start(value: dt.date) -> dt.date:
    """Monday of the week containing ``value``."""
    return value - dt.timedelta(days=value.weekday())


def parse_iso_date(value: str) -> dt.date:
    """Parse ``YYYY-MM-DD``, raising ValidationError on anything else."""
    try:
        return dt.datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except (ValueError, AttributeError):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD") from None


class Clock(Protocol):
    def now(self) -> dt.datetime: ...

    def today(self) -> dt.date: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> dt.datetime:
        return dt.datetime.now(dt.timezone.utc)

    def today(self) -> dt.date:
        return self.now().date()


@dataclass
class FixedClock:
    """Clock pinned to a moment; tests move it explicitly."""

    current: dt.datetime

    def now(self) -> dt.datetime:
        return self.current

    def today(self) -> dt.date:
        return self.current.date()

    def advance(self, **delta: float) -> None:
        self.current = self.current + dt.timedelta(**delta)
