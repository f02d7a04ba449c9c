"""
ganttcore - timeline grid and version diff engine for Gantt charts.

Leaf first: the period model aligns dates to day/week/sprint/month/quarter
boundaries, the grid builder lays out columns, the coordinate mapper converts
between dates and pixels, and the drag controller turns pointer movement into
date updates. The diff engine compares two task-set snapshots independently.
"""

from .version import VERSION, SNAPSHOT_SCHEMA_VERSION
from .models import (
    TimeScale,
    DragType,
    TaskField,
    Task,
    TimelineColumn,
    GridMetrics,
    TaskBarMetrics,
    TaskLayout,
    DragState,
    TaskUpdate,
    DateRange,
    SnapshotMetadata,
    VersionSnapshot,
    TaskChange,
    ModifiedTask,
    VersionDiff,
    AutoVersionConfig,
)
from .periods import (
    start_of_period,
    end_of_period,
    next_period_start,
    add_periods,
    periods_between,
    column_width,
    format_period_label,
)
from .grid import (
    build_grid,
    grid_for_tasks,
    tasks_date_range,
    column_index,
    visible_date_range,
    date_ranges_overlap,
    tasks_in_range,
)
from .mapper import (
    date_to_pixel,
    pixel_to_date,
    snap_to_grid,
    period_span,
    task_bar_metrics,
    layout_tasks,
    today_marker,
    scroll_position_for_today,
)
from .interaction import DragController, DragPhase
from .diff import (
    diff_snapshots,
    diff_tasks,
    task_changes,
    diff_summary,
    format_change_description,
    should_create_auto_version,
    auto_version_description,
    format_version_date,
    format_version_datetime,
)

__version__ = VERSION

__all__ = [
    "VERSION",
    "SNAPSHOT_SCHEMA_VERSION",
    "TimeScale",
    "DragType",
    "TaskField",
    "Task",
    "TimelineColumn",
    "GridMetrics",
    "TaskBarMetrics",
    "TaskLayout",
    "DragState",
    "TaskUpdate",
    "DateRange",
    "SnapshotMetadata",
    "VersionSnapshot",
    "TaskChange",
    "ModifiedTask",
    "VersionDiff",
    "AutoVersionConfig",
    "start_of_period",
    "end_of_period",
    "next_period_start",
    "add_periods",
    "periods_between",
    "column_width",
    "format_period_label",
    "build_grid",
    "grid_for_tasks",
    "tasks_date_range",
    "column_index",
    "visible_date_range",
    "date_ranges_overlap",
    "tasks_in_range",
    "date_to_pixel",
    "pixel_to_date",
    "snap_to_grid",
    "period_span",
    "task_bar_metrics",
    "layout_tasks",
    "today_marker",
    "scroll_position_for_today",
    "DragController",
    "DragPhase",
    "diff_snapshots",
    "diff_tasks",
    "task_changes",
    "diff_summary",
    "format_change_description",
    "should_create_auto_version",
    "auto_version_description",
    "format_version_date",
    "format_version_datetime",
]
