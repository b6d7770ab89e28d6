"""
Upgrade price arithmetic.

Meal and day scope are charged per day in the range (inclusive). Week scope
is charged per full calendar week (Monday to Sunday) contained in the range;
partial weeks at either end are neither charged nor upgraded.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Tuple

from upgrades.models import UpgradeScope


@dataclass(frozen=True)
class UpgradeQuote:
    unit_price: Decimal
    units: int
    total_price: Decimal
    effective_start_date: Optional[date]
    effective_end_date: Optional[date]


def inclusive_days(start_date: date, end_date: date) -> int:
    return (end_date - start_date).days + 1


def full_week_span(start_date: date, end_date: date) -> Optional[Tuple[date, date]]:
    """First Monday and last Sunday of the full weeks in range, or None."""
    first_monday = start_date + timedelta(days=(7 - start_date.weekday()) % 7)
    last_sunday = end_date - timedelta(days=(end_date.weekday() + 1) % 7)
    if last_sunday < first_monday:
        return None
    return first_monday, last_sunday


def full_weeks(start_date: date, end_date: date) -> int:
    span = full_week_span(start_date, end_date)
    if span is None:
        return 0
    return inclusive_days(*span) // 7


def quote(price: Decimal, scope: str, start_date: date, end_date: date) -> UpgradeQuote:
    price = Decimal(price)
    if scope == UpgradeScope.WEEK:
        span = full_week_span(start_date, end_date)
        units = full_weeks(start_date, end_date)
        effective_start, effective_end = span if span else (None, None)
    else:
        units = inclusive_days(start_date, end_date)
        effective_start, effective_end = start_date, end_date
    return UpgradeQuote(
        unit_price=price,
        units=units,
        total_price=(price * units).quantize(Decimal('0.01')),
        effective_start_date=effective_start,
        effective_end_date=effective_end,
    )
