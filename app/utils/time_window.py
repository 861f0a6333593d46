"""
Time window resolution for the analysis endpoints.

Precedence, first match wins:
    1. explicit startDate + endDate, used verbatim
    2. relative units, checked as days > weeks > months > years
    3. named period (day, week, month, year); unknown names mean 30 days
    4. nothing: the last 30 days

Month and year arithmetic goes through dateutil's relativedelta, which clamps
to the last day of a shorter month (2024-03-31 minus one month is 2024-02-29).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Dict, Optional

from dateutil.relativedelta import relativedelta

from app.core.errors import ValidationError
from app.models.window import WindowSpec

DEFAULT_LOOKBACK_DAYS = 30

PERIOD_LOOKBACKS: Dict[str, relativedelta] = {
    "day": relativedelta(),
    "week": relativedelta(days=7),
    "month": relativedelta(months=1),
    "year": relativedelta(years=1),
}


@dataclass(frozen=True)
class TimeWindow:
    start_date: str
    end_date: str

    def to_dict(self) -> Dict[str, str]:
        return {"startDate": self.start_date, "endDate": self.end_date}


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _lookback(spec: WindowSpec, default_days: int) -> relativedelta:
    if spec.days:
        return relativedelta(days=spec.days)
    if spec.weeks:
        return relativedelta(days=spec.weeks * 7)
    if spec.months:
        return relativedelta(months=spec.months)
    if spec.years:
        return relativedelta(years=spec.years)
    if spec.period:
        return PERIOD_LOOKBACKS.get(spec.period, relativedelta(days=default_days))
    return relativedelta(days=default_days)


def resolve_window(
    spec: Optional[WindowSpec] = None,
    today: Optional[date] = None,
    default_days: int = DEFAULT_LOOKBACK_DAYS,
) -> TimeWindow:
    spec = spec or WindowSpec()

    # No ordering or calendar check on an explicit pair
    if spec.start_date and spec.end_date:
        return TimeWindow(start_date=spec.start_date, end_date=spec.end_date)

    today = today or utc_today()
    try:
        start = today - _lookback(spec, default_days)
    except (OverflowError, ValueError) as e:
        raise ValidationError("Time window is out of range") from e
    return TimeWindow(start_date=start.isoformat(), end_date=today.isoformat())
