"""Tests for snapshot reading, writing, validation and schema migration."""

import json
import pytest
import yaml
from datetime import datetime

from ganttcore.models import VersionSnapshot
from ganttcore.recovery import (
    CorruptionError, FileOperationError, MigrationError, MigrationNeededError, RecoverableError
)
from ganttcore.snapshots import (
    MigrationEngine,
    detect_schema_version,
    load_snapshot,
    load_tasks,
    parse_snapshot,
    read_document,
    save_snapshot,
    validate_payload,
)

LEGACY_SNAPSHOT = {
    "projectName": "Website relaunch",
    "tasks": [
        {
            "id": "1",
            "name": "Design",
            "startDate": "2024-06-10T00:00:00.000Z",
            "endDate": "2024-06-15T00:00:00.000Z",
            "color": "#3b82f6",
            "position": 0,
            "progress": 40,
            "isMilestone": False,
            "projectId": "p1",
        },
        {
            "id": "2",
            "name": "Launch",
            "startDate": "2024-06-20T00:00:00.000Z",
            "endDate": "2024-06-20T00:00:00.000Z",
            "color": "#ef4444",
            "position": 1,
            "progress": None,
            "isMilestone": True,
        },
    ],
    "metadata": {
        "totalTasks": 2,
        "dateRange": {"start": "2024-06-10T00:00:00.000Z", "end": "2024-06-20T00:00:00.000Z"},
    },
}


@pytest.fixture
def snapshot(make_task):
    return VersionSnapshot.from_tasks("Demo", [
        make_task("1", (2024, 6, 10), (2024, 6, 15), progress=0),
        make_task("2", (2024, 6, 17), (2024, 6, 21), position=1),
    ])


class TestSchemaDetection:
    """Test working out the schema version of raw documents."""

    def test_current_documents(self, snapshot):
        assert detect_schema_version(snapshot.model_dump(mode='json')) == 2

    def test_legacy_documents(self):
        assert detect_schema_version(LEGACY_SNAPSHOT) == 1

    @pytest.mark.parametrize("payload", [[], {"tasks": []}, {"schema_version": "2"}, {"schema_version": True}])
    def test_unrecognized(self, payload):
        with pytest.raises(CorruptionError):
            detect_schema_version(payload)

    def test_schema_mismatch(self, snapshot):
        payload = snapshot.model_dump(mode='json')
        payload["tasks"][0]["position"] = "first"
        with pytest.raises(CorruptionError, match="schema v2"):
            validate_payload(payload, 2)


class TestMigrationEngine:
    """Test upgrading and downgrading snapshot documents."""

    def test_migration_path(self):
        engine = MigrationEngine()
        assert engine.get_migration_path(1) == [2]
        assert engine.get_migration_path(2) == []

    def test_newer_than_supported(self):
        with pytest.raises(MigrationError, match="newer than supported"):
            MigrationEngine().get_migration_path(99)

    def test_missing_step(self):
        engine = MigrationEngine(migrations=[])
        with pytest.raises(MigrationError, match="No migration available"):
            engine.get_migration_path(1)

    def test_upgrade_legacy(self):
        engine = MigrationEngine()
        assert engine.needs_migration(LEGACY_SNAPSHOT)

        data = engine.upgrade(LEGACY_SNAPSHOT)

        assert data["schema_version"] == 2
        assert data["project_name"] == "Website relaunch"
        assert data["tasks"][0]["start_date"] == "2024-06-10T00:00:00.000Z"
        assert data["tasks"][1]["is_milestone"] is True
        assert data["metadata"]["total_tasks"] == 2
        # The input document is left untouched
        assert "projectName" in LEGACY_SNAPSHOT

    def test_downgrade(self, snapshot):
        engine = MigrationEngine()
        data = engine.downgrade(snapshot.model_dump(mode='json'), 1)

        assert "schema_version" not in data
        assert data["projectName"] == "Demo"
        assert data["tasks"][0]["startDate"] == "2024-06-10T00:00:00"
        assert data["metadata"]["dateRange"]["end"] == "2024-06-21T00:00:00"
        assert detect_schema_version(data) == 1


class TestSnapshotFiles:
    """Test reading and writing snapshot documents."""

    def test_yaml_round_trip(self, tmp_path, snapshot):
        path = tmp_path / "snapshot.yaml"
        save_snapshot(snapshot, path)

        assert yaml.safe_load(path.read_text())["schema_version"] == 2
        assert load_snapshot(path) == snapshot

    def test_json_file_with_dirs(self, tmp_path, snapshot):
        path = tmp_path / "history" / "v1.json"
        save_snapshot(snapshot, path, create_dirs=True)

        assert json.loads(path.read_text())["project_name"] == "Demo"
        assert not list(path.parent.glob(".*.tmp"))

    def test_load_legacy_json(self, tmp_path):
        path = tmp_path / "legacy.json"
        path.write_text(json.dumps(LEGACY_SNAPSHOT))

        loaded = load_snapshot(path)

        assert loaded.schema_version == 2
        assert loaded.project_name == "Website relaunch"
        assert [t.id for t in loaded.tasks] == ["1", "2"]
        assert loaded.tasks[1].is_milestone

    def test_unquoted_yaml_dates(self, tmp_path):
        path = tmp_path / "snapshot.yml"
        path.write_text(
            "schema_version: 2\n"
            "project_name: Demo\n"
            "tasks:\n"
            "  - id: '1'\n"
            "    name: Design\n"
            "    start_date: 2024-06-10\n"
            "    end_date: 2024-06-15\n"
            "metadata:\n"
            "  total_tasks: 1\n"
            "  date_range:\n"
            "    start: 2024-06-10\n"
            "    end: 2024-06-15\n"
        )

        loaded = load_snapshot(path)
        assert loaded.tasks[0].start_date == datetime(2024, 6, 10)

    def test_legacy_without_auto_migrate(self, tmp_path):
        path = tmp_path / "legacy.json"
        path.write_text(json.dumps(LEGACY_SNAPSHOT))

        with pytest.raises(MigrationNeededError):
            load_snapshot(path, auto_migrate=False)

    def test_future_schema(self, tmp_path):
        path = tmp_path / "future.json"
        path.write_text(json.dumps({"schema_version": 99, "project_name": "Demo"}))

        with pytest.raises(MigrationError):
            load_snapshot(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileOperationError, match="File not found"):
            load_snapshot(tmp_path / "missing.json")

    def test_missing_file_is_recoverable(self, tmp_path):
        with pytest.raises(RecoverableError):
            read_document(tmp_path / "missing.yaml")

    def test_syntax_error(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(CorruptionError, match="Syntax error"):
            read_document(path)

    def test_duplicate_ids_rejected(self, snapshot):
        payload = snapshot.model_dump(mode='json')
        payload["tasks"][1]["id"] = "1"

        with pytest.raises(CorruptionError, match="Invalid snapshot"):
            parse_snapshot(payload)


class TestLoadTasks:
    """Test reading bare task lists."""

    def test_top_level_list(self, tmp_path):
        path = tmp_path / "tasks.yaml"
        path.write_text(
            "- id: a\n"
            "  name: Design\n"
            "  startDate: 2024-06-10\n"
            "  endDate: 2024-06-15\n"
            "  progress: 20\n"
        )

        tasks = load_tasks(path)
        assert len(tasks) == 1
        assert tasks[0].end_date == datetime(2024, 6, 15)
        assert tasks[0].progress == 20

    def test_tasks_mapping(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps({"tasks": [
            {"id": "a", "name": "A", "start_date": "2024-06-10", "end_date": "2024-06-12"},
        ]}))
        assert [t.id for t in load_tasks(path)] == ["a"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "tasks.yaml"
        path.write_text("")
        assert load_tasks(path) == []

    def test_invalid_task(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps([{"id": "a", "name": "A", "start_date": "2024-06-12", "end_date": "2024-06-10"}]))

        with pytest.raises(CorruptionError, match="Invalid task"):
            load_tasks(path)

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps({"tasks": "nope"}))

        with pytest.raises(CorruptionError, match="does not contain a task list"):
            load_tasks(path)
