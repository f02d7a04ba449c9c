"""
Calendar period model.

Pure functions that align dates to period boundaries for each TimeScale and
move dates by whole periods. Every other part of the timeline engine builds on
these, so they must agree with each other exactly:

    start_of_period(d) <= d <= end_of_period(d)
    end_of_period(d) + 1us == next_period_start(d)

Dates are naive local datetimes; no timezone conversion happens here.
"""
import calendar
from datetime import datetime, timedelta
from typing import Union

from ganttcore.models import TimeScale
from ganttcore.recovery import UnsupportedScaleError

ScaleLike = Union[TimeScale, str]

COLUMN_WIDTHS = {
    TimeScale.DAY: 40,
    TimeScale.WEEK: 80,
    TimeScale.SPRINT: 120,
    TimeScale.MONTH: 100,
    TimeScale.QUARTER: 150,
}

# Day-count scales move by a fixed number of days per period
DAYS_PER_PERIOD = {
    TimeScale.DAY: 1,
    TimeScale.WEEK: 7,
    TimeScale.SPRINT: 14,
}

# Calendar scales move by a number of months per period
MONTHS_PER_PERIOD = {
    TimeScale.MONTH: 1,
    TimeScale.QUARTER: 3,
}

SMALLEST_UNIT = timedelta(microseconds=1)

MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
               'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


def coerce_scale(scale: ScaleLike) -> TimeScale:
    """Return the TimeScale for an enum member or its string value."""
    if isinstance(scale, TimeScale):
        return scale
    try:
        return TimeScale(scale)
    except ValueError as e:
        raise UnsupportedScaleError(f"Unsupported time scale: {scale!r}") from e


def column_width(scale: ScaleLike) -> int:
    """Default pixel width of one column at the given scale."""
    return COLUMN_WIDTHS[coerce_scale(scale)]


def _midnight(date: datetime) -> datetime:
    return date.replace(hour=0, minute=0, second=0, microsecond=0)


def _add_months(date: datetime, months: int) -> datetime:
    # Clamp the day so Jan 31 + 1 month lands on the last day of February
    index = date.year * 12 + (date.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(date.day, calendar.monthrange(year, month)[1])
    return date.replace(year=year, month=month, day=day)


def iso_week_number(date: datetime) -> int:
    """ISO-8601 week number (1-53)."""
    return date.isocalendar()[1]


def is_weekend(date: datetime) -> bool:
    return date.weekday() >= 5


def start_of_period(date: datetime, scale: ScaleLike) -> datetime:
    """Align a date down to the first instant of its containing period."""
    scale = coerce_scale(scale)
    day = _midnight(date)

    if scale is TimeScale.DAY:
        return day

    if scale is TimeScale.WEEK:
        return day - timedelta(days=day.weekday())

    if scale is TimeScale.SPRINT:
        # Sprints pair ISO weeks: an odd week opens a sprint, an even week closes it
        week_start = start_of_period(day, TimeScale.WEEK)
        if iso_week_number(week_start) % 2 == 0:
            week_start -= timedelta(days=7)
        return week_start

    if scale is TimeScale.MONTH:
        return day.replace(day=1)

    if scale is TimeScale.QUARTER:
        quarter_start_month = (day.month - 1) // 3 * 3 + 1
        return day.replace(month=quarter_start_month, day=1)

    raise UnsupportedScaleError(f"Unsupported time scale: {scale!r}")


def _iso_weeks_in_year(year: int) -> int:
    # Dec 28 always falls in the last ISO week of its year
    return datetime(year, 12, 28).isocalendar()[1]


def _sprints_in_iso_year(year: int) -> int:
    return (_iso_weeks_in_year(year) + 1) // 2


def _step_sprint(start: datetime, forward: bool) -> datetime:
    """Neighbouring sprint start of an aligned sprint start."""
    if forward:
        # Lands in week 1 or 3 of a sprint, or in the week after a week 53 sprint
        return start_of_period(start + timedelta(days=DAYS_PER_PERIOD[TimeScale.SPRINT]), TimeScale.SPRINT)
    return start_of_period(start - timedelta(days=7), TimeScale.SPRINT)


def _add_sprints(date: datetime, count: int) -> datetime:
    """Move to the same offset inside the sprint count sprints away.

    The offset is clamped to the last day of a short week 53 sprint, keeping
    the time of day, the way month arithmetic clamps the day of month.
    """
    start = start_of_period(date, TimeScale.SPRINT)
    offset = date - start
    for _ in range(abs(count)):
        start = _step_sprint(start, count > 0)

    length = _step_sprint(start, True) - start
    if offset >= length:
        offset -= timedelta(days=offset.days - (length.days - 1))
    return start + offset


def _sprints_between(origin: datetime, date: datetime) -> int:
    origin_year, origin_week, _ = start_of_period(origin, TimeScale.SPRINT).isocalendar()
    year, week, _ = start_of_period(date, TimeScale.SPRINT).isocalendar()

    count = (week - 1) // 2 - (origin_week - 1) // 2
    sign = 1 if year >= origin_year else -1
    for y in range(min(origin_year, year), max(origin_year, year)):
        count += sign * _sprints_in_iso_year(y)
    return count


def next_period_start(date: datetime, scale: ScaleLike) -> datetime:
    """First instant of the period after the one containing date."""
    scale = coerce_scale(scale)
    return start_of_period(add_periods(start_of_period(date, scale), 1, scale), scale)


def end_of_period(date: datetime, scale: ScaleLike) -> datetime:
    """Last instant of the period containing date."""
    return next_period_start(date, scale) - SMALLEST_UNIT


def add_periods(date: datetime, count: int, scale: ScaleLike) -> datetime:
    """Move a date by count whole periods; count may be negative.

    Day and week scales add an exact number of days. Sprint scale steps over
    sprint boundaries so a short week 53 sprint counts as one period. Month and
    quarter scales add to the month index and clamp the day of month. The time
    of day is always preserved.
    """
    scale = coerce_scale(scale)
    if scale is TimeScale.SPRINT:
        return _add_sprints(date, count)
    if scale in DAYS_PER_PERIOD:
        return date + timedelta(days=count * DAYS_PER_PERIOD[scale])
    if scale in MONTHS_PER_PERIOD:
        return _add_months(date, count * MONTHS_PER_PERIOD[scale])
    raise UnsupportedScaleError(f"Unsupported time scale: {scale!r}")


def periods_between(origin: datetime, date: datetime, scale: ScaleLike) -> int:
    """Number of whole periods from origin to date (negative when date is earlier)."""
    scale = coerce_scale(scale)
    if scale is TimeScale.SPRINT:
        return _sprints_between(origin, date)
    if scale in DAYS_PER_PERIOD:
        return (date - origin) // timedelta(days=DAYS_PER_PERIOD[scale])
    if scale is TimeScale.MONTH:
        return (date.year - origin.year) * 12 + (date.month - origin.month)
    if scale is TimeScale.QUARTER:
        return ((date.year - origin.year) * 4
                + (date.month - 1) // 3 - (origin.month - 1) // 3)
    raise UnsupportedScaleError(f"Unsupported time scale: {scale!r}")


def format_period_label(date: datetime, scale: ScaleLike) -> str:
    """Header label for the period starting at date."""
    scale = coerce_scale(scale)
    if scale is TimeScale.DAY:
        return f"{MONTH_NAMES[date.month - 1]} {date.day}"
    if scale is TimeScale.WEEK:
        return f"W{iso_week_number(date)}"
    if scale is TimeScale.SPRINT:
        return f"S{iso_week_number(date) // 2 + 1}"
    if scale is TimeScale.MONTH:
        return f"{MONTH_NAMES[date.month - 1]} {date.year}"
    if scale is TimeScale.QUARTER:
        return f"Q{(date.month - 1) // 3 + 1} {date.year}"
    raise UnsupportedScaleError(f"Unsupported time scale: {scale!r}")
