import tempfile, yaml, json, os
from datetime import date, datetime
from typing import Any, Dict, List, Union
from pathlib import Path

from pydantic import ValidationError

from ganttcore.logs import get_logger
from ganttcore.models import Task, VersionSnapshot
from ganttcore.recovery import CorruptionError, FatalError, FileOperationError, MigrationNeededError
from .migrate import MigrationEngine

log = get_logger("snapshots.io")

DATA_YAML = 0
DATA_JSON = 1

YAML_SUFFIXES = ('.yml', '.yaml')

def data_type_for(file_path: Union[Path, str]) -> int:
    """YAML for .yml/.yaml, JSON for everything else."""
    return DATA_YAML if Path(file_path).suffix.lower() in YAML_SUFFIXES else DATA_JSON

def _plain(data: Any) -> Any:
    # YAML turns unquoted timestamps into date objects; schemas expect ISO strings
    if isinstance(data, dict):
        return {key: _plain(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_plain(value) for value in data]
    if isinstance(data, (datetime, date)):
        return data.isoformat()
    return data

def _cleanup(temp_path):
    if temp_path is not None and os.path.exists(temp_path):
        try:
            os.unlink(temp_path)
            log.debug(f"Cleaned up temporary file: {temp_path}")
        except OSError as cleanup_error:
            # Don't mask the original error, just log
            log.warning(f"Could not clean up temp file {temp_path}: {cleanup_error}")

def _create_dirs(file_path : Path):
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
    except (OSError, PermissionError) as e:
        error_msg = f"Cannot create directory {file_path.parent}: {e}"
        log.error(error_msg)
        raise FileOperationError(error_msg) from e

def atomic_write(data_type : int, file_path : Union[Path, str], data : Dict[str, Any], create_dirs : bool = False):
    """
    Serialize and save data to a YAML or JSON file using atomic updates.
    """
    file_path = Path(file_path)
    temp_path = None

    try:
        if create_dirs:
            _create_dirs(file_path)

        # Create temporary file in the same directory as target for atomicity
        with tempfile.NamedTemporaryFile(mode='w', encoding='utf-8', dir=file_path.parent, prefix=f".{file_path.name}.", suffix='.tmp', delete=False) as temp_file:
            temp_path = temp_file.name
            if data_type == DATA_YAML:
                yaml.safe_dump(data, temp_file, default_flow_style=False, sort_keys=False, indent=2, allow_unicode=True)
            elif data_type == DATA_JSON:
                json.dump(data, temp_file, indent=2, ensure_ascii=False)
            else:
                raise FatalError("Unsupported Data Format")
            temp_file.flush()
            os.fsync(temp_file.fileno())

        # Atomic replace - this either completely succeeds or completely fails
        os.replace(temp_path, file_path)
        log.debug(f"Successfully saved file: {file_path}")
        return True

    except FatalError:
        _cleanup(temp_path)
        raise

    except FileOperationError:
        raise

    except (yaml.YAMLError, TypeError, ValueError) as e:
        _cleanup(temp_path)
        # FATAL ERROR: Data cannot be serialized
        error_msg = (f"Data serialization failed for {file_path}. "
                    f"In-memory data may contain non-serializable types: {e}")
        log.critical(error_msg)
        raise FatalError(error_msg) from e

    except (IOError, OSError, PermissionError) as e:
        _cleanup(temp_path)
        # RECOVERABLE ERROR: I/O issues
        error_msg = f"I/O error saving file {file_path}: {e}"
        log.error(error_msg)
        raise FileOperationError(error_msg) from e

def read_document(file_path : Union[Path, str]) -> Any:
    """
    Load and parse a YAML or JSON file.

    Args:
        file_path: Path to the document

    Returns:
        Parsed data with dates normalized to ISO strings

    Raises:
        FileOperationError: If the file is missing or unreadable
        CorruptionError: If the file is not valid YAML/JSON
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileOperationError(f"File not found: {file_path}")

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            if data_type_for(file_path) == DATA_YAML:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

    except (yaml.YAMLError, json.JSONDecodeError) as e:
        # Syntax errors are fatal (corrupted file)
        raise CorruptionError(f"Syntax error in {file_path}: {e}") from e
    except (IOError, OSError, PermissionError) as e:
        # I/O errors are recoverable
        raise FileOperationError(f"Failed to read file {file_path}: {e}") from e

    return _plain(data)

def parse_snapshot(payload: Any, engine: MigrationEngine = None, auto_migrate: bool = True) -> VersionSnapshot:
    """
    Migrate a raw snapshot document to the current schema and build the model.

    Raises:
        MigrationNeededError: If auto_migrate is off and the document is outdated
        CorruptionError: If the document does not describe a valid snapshot
    """
    engine = engine or MigrationEngine()
    if not auto_migrate and engine.needs_migration(payload):
        raise MigrationNeededError("Snapshot uses an older schema version, migrate it first")
    data = engine.upgrade(_plain(payload))
    try:
        return VersionSnapshot.model_validate(data)
    except ValidationError as e:
        raise CorruptionError(f"Invalid snapshot: {e}") from e

def load_snapshot(file_path : Union[Path, str], auto_migrate: bool = True) -> VersionSnapshot:
    """Load a snapshot document of any supported schema version."""
    snapshot = parse_snapshot(read_document(file_path), auto_migrate=auto_migrate)
    log.debug(f"Loaded snapshot '{snapshot.project_name}' with {len(snapshot.tasks)} tasks from {file_path}")
    return snapshot

def save_snapshot(snapshot: VersionSnapshot, file_path : Union[Path, str], create_dirs : bool = False):
    """Write a snapshot in the current schema; format follows the file suffix."""
    return atomic_write(data_type_for(file_path), file_path, snapshot.model_dump(mode='json'), create_dirs=create_dirs)

def load_tasks(file_path : Union[Path, str]) -> List[Task]:
    """
    Load a bare task list: either a top-level list or a mapping with 'tasks'.
    """
    data = read_document(file_path)
    if isinstance(data, dict):
        data = data.get('tasks', [])
    if data is None:
        return []
    if not isinstance(data, list):
        raise CorruptionError(f"File {file_path} does not contain a task list")

    try:
        return [Task.model_validate(item) for item in data]
    except ValidationError as e:
        raise CorruptionError(f"Invalid task in {file_path}: {e}") from e
