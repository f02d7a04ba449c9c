"""Unit tests for Pydantic models."""

import pytest
from datetime import datetime
from pydantic import ValidationError

from ganttcore.models import (
    AutoVersionConfig, DragType, Task, TaskField, TaskUpdate, TimeScale, VersionSnapshot
)


class TestTask:
    """Test Task validation."""

    def test_valid_task(self):
        """Test creating a task with defaults."""
        task = Task(id="1", name="Design", start_date=datetime(2024, 6, 10), end_date=datetime(2024, 6, 15))
        assert task.color == "#3b82f6"
        assert task.position == 0
        assert task.progress is None
        assert not task.is_milestone

    def test_camel_case_input(self):
        """Test the web client's camelCase keys are accepted."""
        task = Task.model_validate({
            "id": "1",
            "name": "Design",
            "startDate": "2024-06-10T00:00:00",
            "endDate": "2024-06-15T00:00:00",
            "isMilestone": False,
            "projectId": "p1",
        })
        assert task.start_date == datetime(2024, 6, 10)
        assert task.project_id == "p1"
        assert "startDate" in task.model_dump(by_alias=True)

    def test_date_order(self):
        """Test end before start is rejected."""
        with pytest.raises(ValidationError, match="end_date must not be before start_date"):
            Task(id="1", name="X", start_date=datetime(2024, 6, 15), end_date=datetime(2024, 6, 10))

    def test_zero_duration_requires_milestone(self):
        """Test equal dates are only allowed for milestones."""
        with pytest.raises(ValidationError, match="unless the task is a milestone"):
            Task(id="1", name="X", start_date=datetime(2024, 6, 10), end_date=datetime(2024, 6, 10))

        milestone = Task(id="1", name="X", start_date=datetime(2024, 6, 10),
                         end_date=datetime(2024, 6, 10), is_milestone=True)
        assert milestone.is_milestone

    @pytest.mark.parametrize("progress", [-1, 101])
    def test_progress_bounds(self, make_task, progress):
        with pytest.raises(ValidationError):
            make_task(progress=progress)

    def test_negative_position(self, make_task):
        with pytest.raises(ValidationError):
            make_task(position=-1)

    def test_frozen(self, make_task):
        """Test tasks cannot be mutated in place."""
        task = make_task()
        with pytest.raises(ValidationError):
            task.name = "Changed"


class TestEnums:
    """Test enum values used on the wire."""

    def test_scale_values(self):
        assert [s.value for s in TimeScale] == ["day", "week", "sprint", "month", "quarter"]

    def test_drag_type_values(self):
        assert DragType("resize-left") is DragType.RESIZE_LEFT

    def test_task_field_attribute(self):
        assert TaskField.START_DATE.value == "startDate"
        assert TaskField.START_DATE.attribute == "start_date"
        assert TaskField.IS_MILESTONE.attribute == "is_milestone"


class TestVersionSnapshot:
    """Test snapshot construction."""

    def test_from_tasks_metadata(self, make_task):
        tasks = [make_task("1", (2024, 6, 10), (2024, 6, 15)), make_task("2", (2024, 6, 3), (2024, 6, 12))]
        snapshot = VersionSnapshot.from_tasks("Demo", tasks)

        assert snapshot.schema_version == 2
        assert snapshot.metadata.total_tasks == 2
        assert snapshot.metadata.date_range.start == datetime(2024, 6, 3)
        assert snapshot.metadata.date_range.end == datetime(2024, 6, 15)

    def test_from_no_tasks(self):
        now = datetime(2024, 6, 13, 12)
        snapshot = VersionSnapshot.from_tasks("Empty", [], now=now)

        assert snapshot.metadata.total_tasks == 0
        assert snapshot.metadata.date_range.start == now
        assert snapshot.metadata.date_range.end == now

    def test_duplicate_ids(self, make_task):
        """Test a snapshot cannot hold two tasks with the same id."""
        with pytest.raises(ValidationError, match="Duplicate task id in snapshot"):
            VersionSnapshot.from_tasks("Demo", [make_task("1"), make_task("1", name="Other")])


class TestAutoVersionConfig:
    """Test AutoVersionConfig defaults."""

    def test_defaults(self):
        config = AutoVersionConfig()
        assert config.enabled
        assert config.on_task_add
        assert config.on_task_delete
        assert not config.on_task_modify
        assert config.min_change_threshold == 3
        assert config.max_versions_to_keep == 50

    def test_camel_case_keys(self):
        config = AutoVersionConfig.model_validate({"minChangeThreshold": 1, "onTaskModify": True})
        assert config.min_change_threshold == 1
        assert config.on_task_modify


class TestTaskUpdate:
    """Test TaskUpdate validation."""

    def test_zero_length_update_rejected(self):
        with pytest.raises(ValidationError, match="end_date must be after start_date"):
            TaskUpdate(task_id="1", start_date=datetime(2024, 1, 8), end_date=datetime(2024, 1, 8))
