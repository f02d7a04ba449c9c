"""
Timeline grid builder.

Enumerates the columns that cover a date range at a given scale and produces
the GridMetrics used for header rendering and pixel math.
"""
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from ganttcore.logs import get_logger
from ganttcore.models import DateRange, GridMetrics, Task, TimelineColumn, TimeScale
from ganttcore.periods import (
    ScaleLike,
    add_periods,
    coerce_scale,
    column_width,
    end_of_period,
    format_period_label,
    is_weekend,
    next_period_start,
    start_of_period,
)

log = get_logger("grid")

# Padding around a task-derived range so edge tasks never sit flush against the grid
LEAD_PADDING = timedelta(weeks=1)
TRAIL_PADDING = timedelta(weeks=2)

# Visible span when there are no tasks to derive a range from
EMPTY_RANGE = timedelta(days=30)

WEEKEND_SCALES = (TimeScale.DAY, TimeScale.WEEK)

# Columns shown by default when no tasks widen the view, clamped to the bounds below
DEFAULT_VISIBLE_COLUMNS = {
    TimeScale.DAY: 30,
    TimeScale.WEEK: 12,
    TimeScale.SPRINT: 8,
    TimeScale.MONTH: 12,
    TimeScale.QUARTER: 8,
}
MIN_VISIBLE_COLUMNS = 10
MAX_VISIBLE_COLUMNS = 60

# Whole periods kept free before the first and after the last task
TASK_MARGIN_PERIODS = 2


def today_midnight(today: Optional[date] = None) -> datetime:
    """Midnight of today (or of the given day) as a naive datetime."""
    if today is None:
        today = date.today()
    if not isinstance(today, datetime):
        today = datetime(today.year, today.month, today.day)
    return today.replace(hour=0, minute=0, second=0, microsecond=0)


def build_grid(start_date: datetime, end_date: datetime, scale: ScaleLike,
               today: Optional[date] = None) -> GridMetrics:
    """Build the column grid covering [start_date, end_date] at the given scale.

    A reversed range (start after end) is a transient UI state, not an error,
    and yields an empty grid.
    """
    scale = coerce_scale(scale)
    width = column_width(scale)

    if start_date > end_date:
        log.debug(f"Reversed range {start_date} > {end_date}; building empty {scale.value} grid")
        return GridMetrics(
            scale=scale,
            column_width=width,
            columns=[],
            total_width=0,
            start_date=start_date,
            end_date=end_date,
        )

    today = today_midnight(today)
    cursor = start_of_period(start_date, scale)
    grid_start = cursor
    grid_end = end_of_period(end_date, scale)
    columns: List[TimelineColumn] = []

    while cursor <= grid_end:
        period_end = end_of_period(cursor, scale)
        columns.append(TimelineColumn(
            date=cursor,
            label=format_period_label(cursor, scale),
            # Sprint, month and quarter columns are never weekends
            is_weekend=scale in WEEKEND_SCALES and is_weekend(cursor),
            is_today=cursor <= today <= period_end,
            width=width,
        ))
        cursor = next_period_start(cursor, scale)

    log.debug(f"Built {scale.value} grid with {len(columns)} columns from {grid_start} to {grid_end}")
    return GridMetrics(
        scale=scale,
        column_width=width,
        columns=columns,
        total_width=len(columns) * width,
        start_date=grid_start,
        end_date=grid_end,
    )


def tasks_date_range(tasks: Iterable[Task], today: Optional[date] = None) -> DateRange:
    """Visible range derived from a task set, padded on both sides."""
    tasks = list(tasks)
    if not tasks:
        start = today_midnight(today)
        return DateRange(start=start, end=start + EMPTY_RANGE)

    earliest = min(t.start_date for t in tasks)
    latest = max(t.end_date for t in tasks)
    return DateRange(start=earliest - LEAD_PADDING, end=latest + TRAIL_PADDING)


def grid_for_tasks(tasks: Iterable[Task], scale: ScaleLike,
                   min_date: Optional[datetime] = None,
                   max_date: Optional[datetime] = None,
                   today: Optional[date] = None) -> GridMetrics:
    """Build the grid for a task set; explicit bounds take precedence."""
    date_range = tasks_date_range(tasks, today=today)
    start = min_date if min_date is not None else date_range.start
    end = max_date if max_date is not None else date_range.end
    return build_grid(start, end, scale, today=today)


def column_index(metrics: GridMetrics, when: datetime) -> Optional[int]:
    """Index of the column whose period contains when, or None outside the grid."""
    if not metrics.columns:
        return None
    target = start_of_period(when, metrics.scale)
    for index, column in enumerate(metrics.columns):
        if column.date == target:
            return index
        if column.date > target:
            break
    return None


def date_ranges_overlap(first: DateRange, second: DateRange) -> bool:
    """True when the two closed ranges share at least one instant."""
    return first.start <= second.end and second.start <= first.end


def tasks_in_range(tasks: Iterable[Task], date_range: DateRange) -> List[Task]:
    """Tasks that are at least partly inside date_range, in input order."""
    return [
        t for t in tasks
        if date_ranges_overlap(DateRange(start=t.start_date, end=t.end_date), date_range)
    ]


def visible_date_range(scale: ScaleLike, center: Optional[datetime] = None,
                       tasks: Iterable[Task] = (),
                       min_columns: int = MIN_VISIBLE_COLUMNS,
                       max_columns: int = MAX_VISIBLE_COLUMNS,
                       today: Optional[date] = None) -> DateRange:
    """
    Initial viewport for a chart.

    With tasks, the range covers all of them plus TASK_MARGIN_PERIODS whole
    periods on each side. Without tasks, it holds the scale's default column
    count (clamped to min_columns..max_columns) centred on center, which
    defaults to today. Both ends are period aligned, so build_grid() over the
    result yields exactly the covered columns.
    """
    scale = coerce_scale(scale)
    tasks = list(tasks)

    if tasks:
        earliest = min(t.start_date for t in tasks)
        latest = max(t.end_date for t in tasks)
        return DateRange(
            start=start_of_period(add_periods(earliest, -TASK_MARGIN_PERIODS, scale), scale),
            end=end_of_period(add_periods(latest, TASK_MARGIN_PERIODS, scale), scale),
        )

    columns = max(min_columns, min(max_columns, DEFAULT_VISIBLE_COLUMNS[scale]))
    center = center if center is not None else today_midnight(today)
    start = start_of_period(add_periods(center, -(columns // 2), scale), scale)
    end = end_of_period(add_periods(start, columns - 1, scale), scale)
    log.debug(f"Visible {scale.value} range of {columns} columns around {center}")
    return DateRange(start=start, end=end)
