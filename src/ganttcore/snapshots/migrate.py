import copy
from typing import Dict, Iterable, List, Optional

from ganttcore.logs import get_logger
from ganttcore.recovery import MigrationError
from ganttcore.version import SNAPSHOT_SCHEMA_VERSION
from .migration import MIGRATIONS, Migration, MigrationData
from .validate import detect_schema_version, validate_payload

log = get_logger("snapshots.migrate")

class MigrationEngine:
    """
    Upgrades raw snapshot documents to the current schema version.

    Migrations are keyed by the version they upgrade to; a document at version
    N passes through N+1, N+2, ... until it reaches latest_version. Each
    intermediate document is validated against its version's schema.
    """
    def __init__(self, migrations: Optional[Iterable[Migration]] = None,
                 latest_version: int = SNAPSHOT_SCHEMA_VERSION):
        self.migrations: Dict[int, Migration] = {}
        for migration in (MIGRATIONS if migrations is None else migrations):
            self.migrations[migration.VERSION] = migration
        self.latest_version = latest_version
        log.debug(f"Loaded snapshot migrations for versions: {sorted(self.migrations)}")

    def get_migration_path(self, current_version: int) -> List[int]:
        """
        Determines the sequence of migrations needed to get from
        current_version to latest_version.

        Raises:
            MigrationError: If the document is newer than this package or a
                step in between has no migration.
        """
        if current_version > self.latest_version:
            raise MigrationError(
                f"Snapshot schema v{current_version} is newer than supported v{self.latest_version}"
            )

        path = list(range(current_version + 1, self.latest_version + 1))
        missing = [v for v in path if v not in self.migrations]
        if missing:
            raise MigrationError(f"No migration available to schema v{missing[0]}")
        return path

    def needs_migration(self, payload: MigrationData) -> bool:
        return detect_schema_version(payload) < self.latest_version

    def upgrade(self, payload: MigrationData) -> MigrationData:
        """Return a copy of payload migrated to latest_version."""
        version = detect_schema_version(payload)
        path = self.get_migration_path(version)
        validate_payload(payload, version)

        data = copy.deepcopy(payload)
        for target in path:
            migration = self.migrations[target]
            try:
                data = migration.upgrade(data)
            except (KeyError, TypeError, AttributeError) as e:
                raise MigrationError(f"Migration to snapshot schema v{target} failed: {e}") from e
            validate_payload(data, target)
            log.info(f"Migrated snapshot from v{target - 1} to v{target}")
        return data

    def downgrade(self, payload: MigrationData, target_version: int) -> MigrationData:
        """Return a copy of payload reverted to target_version."""
        version = detect_schema_version(payload)
        if target_version > version:
            raise MigrationError(f"Cannot downgrade v{version} snapshot to newer v{target_version}")

        data = copy.deepcopy(payload)
        for step in range(version, target_version, -1):
            migration = self.migrations.get(step)
            if migration is None:
                raise MigrationError(f"No migration available from snapshot schema v{step}")
            data = migration.downgrade(data)
            log.info(f"Downgraded snapshot from v{step} to v{step - 1}")
        return data
