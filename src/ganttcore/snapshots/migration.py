import abc
from typing import Any, Dict, Optional

# Raw snapshot document as loaded from YAML/JSON.
MigrationData = Dict[str, Any]

class Migration(abc.ABC):
    """
    An abstract base class for all snapshot schema migrations.

    Each concrete migration class must implement the upgrade() and downgrade()
    methods to handle schema changes for a single version step.
    """
    # The schema version this migration upgrades to (e.g. 2 for 1 -> 2).
    VERSION: Optional[int] = None

    @abc.abstractmethod
    def upgrade(self, data: MigrationData) -> MigrationData:
        """
        Applies schema changes to the data to upgrade it to VERSION.

        Args:
            data: The dictionary representing the document to be migrated.

        Returns:
            The migrated document dictionary.
        """
        pass

    @abc.abstractmethod
    def downgrade(self, data: MigrationData) -> MigrationData:
        """
        Reverts schema changes to downgrade the data to VERSION - 1.

        Args:
            data: The dictionary representing the document to be reverted.

        Returns:
            The downgraded document dictionary.
        """
        pass

class SnakeCaseSnapshotMigration(Migration):
    """v1 -> v2: camelCase keys written by the web client become snake_case
    and the document gains an explicit schema_version marker."""

    VERSION = 2

    TOP_LEVEL = {"projectName": "project_name"}
    METADATA = {"totalTasks": "total_tasks", "dateRange": "date_range"}
    TASK = {
        "startDate": "start_date",
        "endDate": "end_date",
        "isMilestone": "is_milestone",
        "projectId": "project_id",
    }

    @staticmethod
    def _rename(data: MigrationData, mapping: Dict[str, str]) -> MigrationData:
        return {mapping.get(key, key): value for key, value in data.items()}

    def upgrade(self, data: MigrationData) -> MigrationData:
        result = self._rename(data, self.TOP_LEVEL)
        result.pop("schemaVersion", None)
        result["tasks"] = [self._rename(task, self.TASK) for task in data.get("tasks", [])]
        result["metadata"] = self._rename(data.get("metadata", {}), self.METADATA)
        result["schema_version"] = self.VERSION
        return result

    def downgrade(self, data: MigrationData) -> MigrationData:
        top = {v: k for k, v in self.TOP_LEVEL.items()}
        task = {v: k for k, v in self.TASK.items()}
        metadata = {v: k for k, v in self.METADATA.items()}

        result = self._rename(data, top)
        result.pop("schema_version", None)
        result["tasks"] = [self._rename(t, task) for t in data.get("tasks", [])]
        result["metadata"] = self._rename(data.get("metadata", {}), metadata)
        return result

# Registered migrations, one per version step.
MIGRATIONS = [
    SnakeCaseSnapshotMigration(),
]
