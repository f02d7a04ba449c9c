from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, List

from ganttcore.version import SNAPSHOT_SCHEMA_VERSION

class TimeScale(Enum):
    DAY = "day"
    WEEK = "week"
    SPRINT = "sprint"
    MONTH = "month"
    QUARTER = "quarter"

class DragType(Enum):
    MOVE = "move"
    RESIZE_LEFT = "resize-left"
    RESIZE_RIGHT = "resize-right"

class TaskField(Enum):
    """Fields compared by the diff engine, declared in report order."""
    NAME = "name"
    START_DATE = "startDate"
    END_DATE = "endDate"
    COLOR = "color"
    POSITION = "position"
    PROGRESS = "progress"
    IS_MILESTONE = "isMilestone"

    @property
    def attribute(self) -> str:
        """Python attribute name on Task."""
        return _TASK_FIELD_ATTRIBUTES[self]

_TASK_FIELD_ATTRIBUTES = {
    TaskField.NAME: "name",
    TaskField.START_DATE: "start_date",
    TaskField.END_DATE: "end_date",
    TaskField.COLOR: "color",
    TaskField.POSITION: "position",
    TaskField.PROGRESS: "progress",
    TaskField.IS_MILESTONE: "is_milestone",
}

class GanttModel(BaseModel):
    """Base for all value models; accepts both snake_case and camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class Task(GanttModel):
    """A single bar (or milestone diamond) on the chart."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Opaque unique identifier of the task")
    name: str = Field(description="Display name of the task")
    start_date: datetime = Field(description="When the task starts")
    end_date: datetime = Field(description="When the task ends")
    color: str = Field(default="#3b82f6", description="Bar color as a CSS color string")
    position: int = Field(default=0, ge=0, description="Display order; ties keep insertion order")
    progress: Optional[int] = Field(default=None, ge=0, le=100, description="Completion percentage")
    is_milestone: bool = Field(default=False, description="Zero-duration marker instead of a bar")
    project_id: Optional[str] = Field(default=None, description="Owning project, if known")

    @field_validator('start_date', 'end_date')
    @classmethod
    def validate_naive(cls, v):
        # Period math works on naive local dates; aware values are stored as UTC wall time
        if v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @model_validator(mode='after')
    def validate_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.end_date == self.start_date and not self.is_milestone:
            raise ValueError("start_date must be before end_date unless the task is a milestone")
        return self

class TimelineColumn(GanttModel):
    model_config = ConfigDict(frozen=True)

    date: datetime = Field(description="Start of the period this column covers")
    label: str = Field(description="Header label formatted for the scale")
    is_weekend: bool = Field(default=False, description="Column starts on a Saturday or Sunday")
    is_today: bool = Field(default=False, description="Column period contains the current day")
    width: int = Field(description="Column width in pixels")

class GridMetrics(GanttModel):
    """A built timeline grid. Pixel offsets are measured from start_date."""

    model_config = ConfigDict(frozen=True)

    scale: TimeScale = Field(description="Scale the grid was built for")
    column_width: int = Field(description="Width of one column in pixels")
    columns: List[TimelineColumn] = Field(default_factory=list, description="Columns in date order")
    total_width: int = Field(default=0, description="Sum of all column widths")
    start_date: datetime = Field(description="Start of the first column (pixel origin)")
    end_date: datetime = Field(description="End of the last requested period")

class TaskBarMetrics(GanttModel):
    left: float
    width: float

class TaskLayout(GanttModel):
    task: Task
    row: int
    left: float
    width: float

class DragState(GanttModel):
    """Live state of a single drag gesture."""

    model_config = ConfigDict(validate_assignment=True)

    task_id: str
    drag_type: DragType
    start_x: float = Field(description="Pointer x where the gesture began")
    start_date: datetime = Field(description="Live start date")
    end_date: datetime = Field(description="Live end date")
    original_start_date: datetime = Field(description="Committed start when the gesture began")
    original_end_date: datetime = Field(description="Committed end when the gesture began")

class TaskUpdate(GanttModel):
    """Date change proposed to the caller at the end of a drag."""

    model_config = ConfigDict(frozen=True)

    task_id: str
    start_date: datetime
    end_date: datetime

    @model_validator(mode='after')
    def validate_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self

class DateRange(GanttModel):
    start: datetime
    end: datetime

class SnapshotMetadata(GanttModel):
    total_tasks: int = Field(ge=0, description="Number of tasks in the snapshot")
    date_range: DateRange = Field(description="Earliest start and latest end across the tasks")

class VersionSnapshot(GanttModel):
    """An immutable saved copy of a project's task set."""

    model_config = ConfigDict(frozen=True)

    schema_version: int = Field(default=SNAPSHOT_SCHEMA_VERSION, description="Snapshot document schema version")
    project_name: str = Field(description="Project name at the time of the snapshot")
    tasks: List[Task] = Field(default_factory=list, description="Tasks in saved order")
    metadata: SnapshotMetadata

    @field_validator('tasks')
    @classmethod
    def validate_unique_ids(cls, v):
        seen = set()
        for task in v:
            if task.id in seen:
                raise ValueError(f"Duplicate task id in snapshot: {task.id}")
            seen.add(task.id)
        return v

    @classmethod
    def from_tasks(cls, project_name: str, tasks: List[Task], now: Optional[datetime] = None) -> 'VersionSnapshot':
        """Build a snapshot and its metadata from a task list."""
        tasks = list(tasks)
        if tasks:
            date_range = DateRange(
                start=min(t.start_date for t in tasks),
                end=max(t.end_date for t in tasks),
            )
        else:
            now = now or datetime.now()
            date_range = DateRange(start=now, end=now)

        return cls(
            project_name=project_name,
            tasks=tasks,
            metadata=SnapshotMetadata(total_tasks=len(tasks), date_range=date_range),
        )

class TaskChange(GanttModel):
    field: TaskField
    old_value: Any = None
    new_value: Any = None

class ModifiedTask(GanttModel):
    task_id: str
    before: Task
    after: Task
    changes: List[TaskChange] = Field(default_factory=list)

class VersionDiff(GanttModel):
    added: List[Task] = Field(default_factory=list)
    removed: List[Task] = Field(default_factory=list)
    modified: List[ModifiedTask] = Field(default_factory=list)

    @property
    def change_count(self) -> int:
        return len(self.added) + len(self.removed) + len(self.modified)

    @property
    def is_empty(self) -> bool:
        return self.change_count == 0

class AutoVersionConfig(GanttModel):
    """Policy deciding when live edits produce an automatic snapshot."""

    enabled: bool = Field(default=True, description="Master switch for automatic versions")
    on_task_add: bool = Field(default=True, description="Version when tasks are added")
    on_task_delete: bool = Field(default=True, description="Version when tasks are removed")
    on_task_modify: bool = Field(default=False, description="Version on modify-only edits")
    min_change_threshold: int = Field(default=3, ge=0, description="Minimum changed tasks before versioning")
    max_versions_to_keep: int = Field(default=50, ge=1, description="Retention limit for automatic versions")
