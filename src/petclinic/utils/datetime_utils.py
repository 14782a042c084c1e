"""
Clock helpers and pet age arithmetic.

Everything that needs "now" or "today" goes through ``get_current_utc`` and
``get_current_date``, so tests can patch a single name.
"""

import calendar
from datetime import date, datetime
from typing import Dict, Optional
from zoneinfo import ZoneInfo

UTC = ZoneInfo("UTC")


def get_current_utc() -> datetime:
    return datetime.now(UTC)


def get_current_date() -> date:
    return date.today()


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def calculate_pet_age(
    birth_date: date, reference_date: Optional[date] = None
) -> Dict[str, int]:
    """
    Age as whole ``years``, ``months`` and ``days`` on ``reference_date`` (default today).

    Raises:
        ValueError: If ``birth_date`` is after ``reference_date``
    """
    on = reference_date or get_current_date()
    if birth_date > on:
        raise ValueError("Birth date cannot be in the future")

    months = (on.year - birth_date.year) * 12 + on.month - birth_date.month
    if on.day < birth_date.day:
        months -= 1

    # Days are counted from the last monthly anniversary; a birthday on the
    # 31st falls on the last day of shorter months.
    year, month = divmod(birth_date.month - 1 + months, 12)
    year += birth_date.year
    day = min(birth_date.day, calendar.monthrange(year, month + 1)[1])
    anniversary = date(year, month + 1, day)

    return {"years": months // 12, "months": months % 12, "days": (on - anniversary).days}


def format_pet_age(birth_date: date, reference_date: Optional[date] = None) -> str:
    """
    Age in its two largest units: "2 years, 3 months", "1 year", "5 weeks", "3 days".
    """
    age = calculate_pet_age(birth_date, reference_date)
    years, months, days = age["years"], age["months"], age["days"]

    if years:
        return _plural(years, "year") + (f", {_plural(months, 'month')}" if months else "")
    if months:
        return _plural(months, "month")
    if days >= 7:
        return _plural(days // 7, "week")
    return _plural(days, "day")
