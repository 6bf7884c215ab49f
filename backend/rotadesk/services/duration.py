from __future__ import annotations

from datetime import date, timedelta

_SATURDAY = 5


def count_business_days(start_date: date, end_date: date) -> int:
    """Count Monday-Friday dates in the inclusive range ``[start_date, end_date]``.

    Returns 0 for an inverted range. Whole weeks are counted arithmetically so
    long ranges do not iterate day by day.
    """
    if end_date < start_date:
        return 0

    total_days = (end_date - start_date).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    count = full_weeks * 5

    current = start_date + timedelta(days=full_weeks * 7)
    for _ in range(remainder):
        if current.weekday() < _SATURDAY:
            count += 1
        current += timedelta(days=1)
    return count


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Inclusive interval intersection test."""
    return start_a <= end_b and end_a >= start_b
