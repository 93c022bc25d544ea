"""
Budget period resolution.

A budget recurs daily, weekly, monthly, quarterly or yearly, or spans a
custom range. Given a reference date, `compute_period` returns the inclusive
calendar window the budget is currently accountable for:

    daily       today .. today
    weekly      most recent week start .. +6 days
    monthly     1st .. last day of the month
    quarterly   1st day .. last day of the calendar quarter
    yearly      Jan 1 .. Dec 31
    custom      start_date .. end_date (or one year after today if open-ended)

The natural window is then clipped to the budget's own [start_date, end_date]
range, so a monthly budget that starts mid-month reports a partial first
month and full calendar months afterwards.
"""
import calendar
import enum
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

import pytz

logger = logging.getLogger(__name__)


class BudgetPeriod(str, enum.Enum):
    none = "none"
    custom = "custom"
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    quarterly = "quarterly"
    yearly = "yearly"


@dataclass(frozen=True)
class PeriodDates:
    period_start: date
    period_end: date

    def __contains__(self, day: date) -> bool:
        return self.period_start <= day <= self.period_end


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _add_years(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        # Feb 29 → Feb 28
        return day.replace(year=day.year + years, day=28)


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def today_for(tz_name: str | None, now: datetime | None = None) -> date:
    """Calendar date of `now` (default: the current instant) in the given IANA zone."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    try:
        tz = pytz.timezone(tz_name or "UTC")
    except pytz.UnknownTimeZoneError:
        logger.warning("Unknown timezone %r, falling back to UTC", tz_name)
        tz = pytz.utc
    return now.astimezone(tz).date()


# ─── Resolver ────────────────────────────────────────────────────────────────

def natural_period(period: str, today: date, week_start: int = calendar.SUNDAY) -> PeriodDates | None:
    """The unclipped calendar window containing `today`, or None for custom ranges."""
    if period == BudgetPeriod.daily:
        return PeriodDates(today, today)
    if period == BudgetPeriod.weekly:
        start = today - timedelta(days=(today.weekday() - week_start) % 7)
        return PeriodDates(start, start + timedelta(days=6))
    if period == BudgetPeriod.monthly:
        return PeriodDates(today.replace(day=1), _month_end(today.year, today.month))
    if period == BudgetPeriod.quarterly:
        first_month = (today.month - 1) // 3 * 3 + 1
        return PeriodDates(
            date(today.year, first_month, 1),
            _month_end(today.year, first_month + 2),
        )
    if period == BudgetPeriod.yearly:
        return PeriodDates(date(today.year, 1, 1), date(today.year, 12, 31))
    return None


def compute_period(
    period: str,
    start_date: date,
    end_date: date | None,
    now: date | datetime,
    week_start: int = calendar.SUNDAY,
) -> PeriodDates:
    """Resolve the window a budget tracks as of `now`, clipped to its validity range."""
    today = _as_date(now)

    # Budgets that have not started yet report their first period; expired ones their last.
    ref = max(today, start_date)
    if end_date is not None:
        ref = min(ref, end_date)

    window = natural_period(period, ref, week_start)
    if window is None:
        window = PeriodDates(start_date, end_date or _add_years(ref, 1))

    period_start, period_end = window.period_start, window.period_end
    if period_start < start_date:
        period_start = start_date
    if end_date is not None and period_end > end_date:
        period_end = end_date

    return PeriodDates(period_start, period_end)
