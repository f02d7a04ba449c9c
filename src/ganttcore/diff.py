"""
Version diff engine.

Compares two task-set snapshots and classifies every task id as added,
removed, modified or unchanged. Output order is fixed (added and modified
follow the newer list, removed follows the older list, changes follow
TaskField declaration order) so identical inputs always produce identical
reports for the audit trail.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ganttcore.logs import get_logger
from ganttcore.models import (
    AutoVersionConfig,
    ModifiedTask,
    Task,
    TaskChange,
    TaskField,
    VersionDiff,
    VersionSnapshot,
)
from ganttcore.periods import MONTH_NAMES

log = get_logger("diff")


def task_changes(before: Task, after: Task) -> List[TaskChange]:
    """Field-level changes between two versions of the same task."""
    changes = []
    for field in TaskField:
        old_value = getattr(before, field.attribute)
        new_value = getattr(after, field.attribute)
        # Dates compare at full resolution; a same-day time change is a change
        if old_value != new_value:
            changes.append(TaskChange(field=field, old_value=old_value, new_value=new_value))
    return changes


def diff_tasks(older: Iterable[Task], newer: Iterable[Task]) -> VersionDiff:
    """Diff two bare task lists."""
    older = list(older)
    newer = list(newer)
    older_by_id: Dict[str, Task] = {t.id: t for t in older}
    newer_by_id: Dict[str, Task] = {t.id: t for t in newer}

    added = [t for t in newer if t.id not in older_by_id]
    removed = [t for t in older if t.id not in newer_by_id]

    modified = []
    for task in newer:
        previous = older_by_id.get(task.id)
        if previous is None:
            continue
        changes = task_changes(previous, task)
        if changes:
            modified.append(ModifiedTask(task_id=task.id, before=previous, after=task, changes=changes))

    log.debug(f"Diff: {len(added)} added, {len(removed)} removed, {len(modified)} modified")
    return VersionDiff(added=added, removed=removed, modified=modified)


def diff_snapshots(older: VersionSnapshot, newer: VersionSnapshot) -> VersionDiff:
    """Diff the task sets of two snapshots."""
    return diff_tasks(older.tasks, newer.tasks)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def _format_date(value) -> str:
    if isinstance(value, datetime):
        if value.hour or value.minute or value.second or value.microsecond:
            return value.strftime('%Y-%m-%d %H:%M')
        return value.strftime('%Y-%m-%d')
    return str(value)


def format_change_description(change: TaskChange) -> str:
    """Human readable one-liner for a single field change."""
    field, old, new = change.field, change.old_value, change.new_value

    if field is TaskField.NAME:
        return f'Name: "{old}" → "{new}"'
    if field in (TaskField.START_DATE, TaskField.END_DATE):
        label = 'Start' if field is TaskField.START_DATE else 'End'
        return f"{label}: {_format_date(old)} → {_format_date(new)}"
    if field is TaskField.COLOR:
        return "Color changed"
    if field is TaskField.POSITION:
        return f"Position: {old} → {new}"
    if field is TaskField.PROGRESS:
        return f"Progress: {old}% → {new}%"
    if field is TaskField.IS_MILESTONE:
        return "Converted to milestone" if new else "Converted from milestone"
    return f"{field.value} changed"


def diff_summary(diff: VersionDiff) -> str:
    """Short summary such as '2 tasks added, 1 task modified'."""
    parts = []
    if diff.added:
        parts.append(f"{_plural(len(diff.added), 'task')} added")
    if diff.removed:
        parts.append(f"{_plural(len(diff.removed), 'task')} removed")
    if diff.modified:
        parts.append(f"{_plural(len(diff.modified), 'task')} modified")
    return ", ".join(parts) if parts else "No changes"


def format_version_date(when: datetime, now: Optional[datetime] = None) -> str:
    """Relative age of a version: 'Just now', '5 minutes ago', ... then 'Jun 13'.

    Versions older than 30 days get a calendar date, with the year added when
    it differs from now.
    """
    now = now or datetime.now()
    seconds = int((now - when).total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if seconds < 60:
        return "Just now"
    if minutes < 60:
        return f"{_plural(minutes, 'minute')} ago"
    if hours < 24:
        return f"{_plural(hours, 'hour')} ago"
    if days < 7:
        return f"{_plural(days, 'day')} ago"
    if days < 30:
        return f"{_plural(days // 7, 'week')} ago"

    label = f"{MONTH_NAMES[when.month - 1]} {when.day}"
    if when.year != now.year:
        label += f", {when.year}"
    return label


def format_version_datetime(when: datetime) -> str:
    """Full timestamp such as 'Jun 13, 2024, 3:05 PM'."""
    hour = when.hour % 12 or 12
    meridiem = "AM" if when.hour < 12 else "PM"
    return f"{MONTH_NAMES[when.month - 1]} {when.day}, {when.year}, {hour}:{when.minute:02d} {meridiem}"


def auto_version_description(diff: VersionDiff) -> str:
    return f"Auto-save: {diff_summary(diff)}"


def should_create_auto_version(diff: VersionDiff, config: AutoVersionConfig) -> bool:
    """Decide whether a diff of live edits warrants an automatic snapshot."""
    if not config.enabled or diff.is_empty:
        return False
    if diff.change_count < config.min_change_threshold:
        return False

    has_adds = bool(diff.added)
    has_deletes = bool(diff.removed)
    has_modifies = bool(diff.modified)

    if has_adds and not config.on_task_add:
        return False
    if has_deletes and not config.on_task_delete:
        return False
    if has_modifies and not has_adds and not has_deletes and not config.on_task_modify:
        return False
    return True
