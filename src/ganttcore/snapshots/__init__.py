"""
Snapshot documents: versioned schema, validation, migration and file I/O.
"""

from .io import load_snapshot, save_snapshot, load_tasks, parse_snapshot, read_document
from .migrate import MigrationEngine
from .migration import Migration, SnakeCaseSnapshotMigration
from .validate import detect_schema_version, validate_payload

__all__ = [
    'load_snapshot',
    'save_snapshot',
    'load_tasks',
    'parse_snapshot',
    'read_document',
    'MigrationEngine',
    'Migration',
    'SnakeCaseSnapshotMigration',
    'detect_schema_version',
    'validate_payload',
]
