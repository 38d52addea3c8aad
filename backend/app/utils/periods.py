"""
Time and rating-period helpers.

All timestamps are handled as UTC. SQLite hands timezone-aware columns back
as naive datetimes, so everything read from storage goes through ensure_utc().
"""
from datetime import date, datetime, time, timedelta, timezone

from dateutil.relativedelta import relativedelta


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def minutes_between(start: datetime, end: datetime) -> float:
    return (ensure_utc(end) - ensure_utc(start)).total_seconds() / 60


def month_period(day: date | None = None) -> tuple[date, date]:
    """First and last calendar day of the month containing `day` (default: today, UTC)."""
    day = day or utcnow().date()
    start = day.replace(day=1)
    end = start + relativedelta(months=1) - timedelta(days=1)
    return start, end


def period_bounds(period_start: date, period_end: date) -> tuple[datetime, datetime]:
    """Half-open UTC datetime range [start 00:00, day after end 00:00)."""
    lower = datetime.combine(period_start, time.min, tzinfo=timezone.utc)
    upper = datetime.combine(period_end + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return lower, upper


def end_of_day(moment: datetime) -> datetime:
    moment = ensure_utc(moment)
    return datetime.combine(moment.date(), time(23, 59, 59), tzinfo=timezone.utc)


def rating_periods(today: date | None = None) -> list[dict]:
    """Selectable rating periods: current month, last month, quarter, year."""
    today = today or utcnow().date()
    current_start, current_end = month_period(today)
    last_start, last_end = month_period(current_start - timedelta(days=1))

    quarter_start = date(today.year, (today.month - 1) // 3 * 3 + 1, 1)
    quarter_end = quarter_start + relativedelta(months=3) - timedelta(days=1)

    return [
        {"id": "current", "name": "Current month", "start_date": current_start, "end_date": current_end},
        {"id": "last", "name": "Last month", "start_date": last_start, "end_date": last_end},
        {"id": "quarter", "name": "Quarter", "start_date": quarter_start, "end_date": quarter_end},
        {"id": "year", "name": "Year", "start_date": date(today.year, 1, 1), "end_date": date(today.year, 12, 31)},
    ]
