"""
Coordinate mapper.

Converts between dates and pixel offsets on a built grid. Dates have no
sub-period resolution here: a pixel maps to the start of the column it falls
in, and a date maps to the left edge of its column.
"""
import math
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from ganttcore.grid import today_midnight
from ganttcore.models import GridMetrics, Task, TaskBarMetrics, TaskLayout, TimeScale
from ganttcore.periods import (
    DAYS_PER_PERIOD,
    ScaleLike,
    add_periods,
    coerce_scale,
    periods_between,
    start_of_period,
)
from ganttcore.recovery import TaskContractError

# Bars never shrink below half a column so short tasks stay clickable
MIN_BAR_FRACTION = 0.5

ONE_DAY = timedelta(days=1)


def date_to_pixel(when: datetime, grid_start: datetime, scale: ScaleLike, column_width: float) -> float:
    """Left edge, in pixels from grid_start, of the column containing when."""
    return periods_between(grid_start, when, scale) * column_width


def pixel_to_date(pixel: float, grid_start: datetime, scale: ScaleLike, column_width: float) -> datetime:
    """Start date of the column under a pixel offset."""
    return add_periods(grid_start, math.floor(pixel / column_width), scale)


def snap_to_grid(when: datetime, scale: ScaleLike) -> datetime:
    """Round a date down to the start of its period."""
    return start_of_period(when, scale)


def _ceil_div(delta: timedelta, unit: timedelta) -> int:
    return -((-delta) // unit)


def period_span(start: datetime, end: datetime, scale: ScaleLike) -> int:
    """Number of columns a [start, end] range occupies."""
    scale = coerce_scale(scale)
    if end < start:
        raise TaskContractError(f"Range ends before it starts: {start} > {end}")

    if scale is TimeScale.SPRINT:
        days = _ceil_div(end - start, ONE_DAY)
        return -(-days // DAYS_PER_PERIOD[scale])
    if scale in DAYS_PER_PERIOD:
        return _ceil_div(end - start, timedelta(days=DAYS_PER_PERIOD[scale]))

    # Calendar scales count every touched month or quarter
    return periods_between(start, end, scale) + 1


def task_bar_metrics(task: Task, metrics: GridMetrics) -> TaskBarMetrics:
    """Pixel left and width of a task's bar on the grid."""
    width = metrics.column_width
    left = date_to_pixel(task.start_date, metrics.start_date, metrics.scale, width)
    span = period_span(task.start_date, task.end_date, metrics.scale)
    return TaskBarMetrics(left=left, width=max(span * width, width * MIN_BAR_FRACTION))


def order_tasks(tasks: Iterable[Task]) -> List[Task]:
    """Tasks in display order: by position, ties in insertion order."""
    return sorted(tasks, key=lambda t: t.position)


def layout_tasks(tasks: Iterable[Task], metrics: GridMetrics) -> List[TaskLayout]:
    """One bar per task, one row per task, in display order."""
    layout = []
    for row, task in enumerate(order_tasks(tasks)):
        bar = task_bar_metrics(task, metrics)
        layout.append(TaskLayout(task=task, row=row, left=bar.left, width=bar.width))
    return layout


def today_marker(metrics: GridMetrics, today: Optional[date] = None) -> Optional[float]:
    """Pixel offset of the today line, or None when today is off the grid."""
    if not metrics.columns:
        return None
    today = today_midnight(today)
    if today < metrics.start_date or today > metrics.end_date:
        return None
    return date_to_pixel(today, metrics.start_date, metrics.scale, metrics.column_width)


def scroll_position_for_today(metrics: GridMetrics, container_width: float,
                              today: Optional[date] = None) -> float:
    """Horizontal scroll offset that centres today in a viewport of container_width.

    Clamped to the scrollable range [0, total_width - container_width].
    """
    if not metrics.columns:
        return 0.0
    position = date_to_pixel(today_midnight(today), metrics.start_date, metrics.scale, metrics.column_width)
    max_scroll = max(0, metrics.total_width - container_width)
    return float(min(max(0, position - container_width / 2), max_scroll))
