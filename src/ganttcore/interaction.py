"""
Drag/resize interaction state machine.

One DragController drives one gesture at a time through idle -> dragging ->
idle. Nothing is written back to the caller until pointer_up(), so cancel()
is an implicit rollback.

Every pointer_move() recomputes the live dates from the original anchors and
the total pointer delta, so dropped or reordered move events cannot drift the
final result.
"""
import math
from enum import Enum
from typing import Callable, Optional

from ganttcore.logs import get_logger
from ganttcore.mapper import MIN_BAR_FRACTION, date_to_pixel, period_span, snap_to_grid
from ganttcore.models import DragState, DragType, GridMetrics, Task, TaskBarMetrics, TaskUpdate
from ganttcore.periods import add_periods, next_period_start
from ganttcore.recovery import DragInProgressError

log = get_logger("interaction")

UpdateCallback = Callable[[TaskUpdate], None]

class DragPhase(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"

def _round_half_up(value: float) -> int:
    # Match pointer-rounding in the browser: +0.5 column counts as a full period
    return math.floor(value + 0.5)

class DragController:
    """Turns raw pointer x positions into snapped task date updates."""

    def __init__(self, metrics: GridMetrics, read_only: bool = False,
                 on_update: Optional[UpdateCallback] = None):
        self.metrics = metrics
        self.read_only = read_only
        self.on_update = on_update
        self._drag: Optional[DragState] = None

    @property
    def state(self) -> DragPhase:
        return DragPhase.DRAGGING if self._drag is not None else DragPhase.IDLE

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None

    @property
    def drag_state(self) -> Optional[DragState]:
        """Copy of the live drag state, or None when idle."""
        if self._drag is None:
            return None
        return self._drag.model_copy()

    def pointer_down(self, task: Task, x: float, drag_type: DragType = DragType.MOVE) -> Optional[DragState]:
        """Start a gesture on a task body or edge handle.

        Milestones and read-only charts are not draggable; the controller stays
        idle and None is returned.
        """
        if self._drag is not None:
            raise DragInProgressError(
                f"Drag already active for task {self._drag.task_id}. Finish or cancel it first."
            )

        if self.read_only or task.is_milestone:
            log.debug(f"Ignoring pointer-down on task {task.id} (read_only={self.read_only}, milestone={task.is_milestone})")
            return None

        self._drag = DragState(
            task_id=task.id,
            drag_type=DragType(drag_type),
            start_x=x,
            start_date=task.start_date,
            end_date=task.end_date,
            original_start_date=task.start_date,
            original_end_date=task.end_date,
        )
        log.debug(f"Started {self._drag.drag_type.value} drag on task {task.id} at x={x}")
        return self.drag_state

    def pointer_move(self, x: float) -> bool:
        """Apply the pointer position; return True when the live dates changed.

        A delta that rounds to zero periods puts the live dates back on the
        anchors instead of leaving the last accepted position in place.
        """
        drag = self._drag
        if drag is None:
            return False

        scale = self.metrics.scale
        periods = _round_half_up((x - drag.start_x) / self.metrics.column_width)
        start = add_periods(drag.original_start_date, periods, scale)
        end = add_periods(drag.original_end_date, periods, scale)

        if drag.drag_type is DragType.MOVE:
            new_start, new_end = start, end
        elif drag.drag_type is DragType.RESIZE_LEFT:
            if start >= drag.end_date:
                log.debug(f"Rejected resize-left of task {drag.task_id}: {start} would not precede {drag.end_date}")
                return False
            new_start, new_end = start, drag.end_date
        else:
            if end <= drag.start_date:
                log.debug(f"Rejected resize-right of task {drag.task_id}: {end} would not follow {drag.start_date}")
                return False
            new_start, new_end = drag.start_date, end

        if new_start == drag.start_date and new_end == drag.end_date:
            return False

        drag.start_date = new_start
        drag.end_date = new_end
        return True

    def pointer_up(self) -> Optional[TaskUpdate]:
        """Finish the gesture; return the snapped update if the dates moved."""
        drag = self._drag
        if drag is None:
            return None
        self._drag = None

        if drag.start_date == drag.original_start_date and drag.end_date == drag.original_end_date:
            log.debug(f"Drag on task {drag.task_id} ended where it started")
            return None

        scale = self.metrics.scale
        start = snap_to_grid(drag.start_date, scale)
        end = snap_to_grid(drag.end_date, scale)
        if end <= start:
            # Both edges snapped into one period; keep the task one period long
            end = next_period_start(start, scale)

        if start == drag.original_start_date and end == drag.original_end_date:
            log.debug(f"Drag on task {drag.task_id} ended without a date change")
            return None

        update = TaskUpdate(task_id=drag.task_id, start_date=start, end_date=end)
        log.debug(f"Drag on task {drag.task_id} committed {start} - {end}")
        if self.on_update is not None:
            self.on_update(update)
        return update

    def cancel(self) -> None:
        """Abandon the gesture without emitting anything."""
        if self._drag is not None:
            log.debug(f"Cancelled drag on task {self._drag.task_id}")
        self._drag = None

    def preview_metrics(self) -> Optional[TaskBarMetrics]:
        """Bar position for the live drag state, for rendering while dragging."""
        drag = self._drag
        if drag is None:
            return None
        width = self.metrics.column_width
        scale = self.metrics.scale
        left = date_to_pixel(drag.start_date, self.metrics.start_date, scale, width)
        span = period_span(drag.start_date, drag.end_date, scale)
        return TaskBarMetrics(left=left, width=max(span * width, width * MIN_BAR_FRACTION))
