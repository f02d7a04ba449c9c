import json
from importlib.resources import files
from typing import Any, Dict

from jsonschema import validate, ValidationError, SchemaError

from ganttcore.logs import get_logger
from ganttcore.models import VersionSnapshot
from ganttcore.recovery import CorruptionError, FatalError
from ganttcore.version import SNAPSHOT_SCHEMA_VERSION

log = get_logger("snapshots.validate")

LEGACY_SCHEMA_VERSION = 1

def detect_schema_version(payload: Any) -> int:
    """
    Work out which snapshot schema a raw document was written with.

    Documents written by this package carry schema_version. The web client's
    original blobs carry no marker and use camelCase keys (projectName).

    Raises:
        CorruptionError: If the payload is not a snapshot document at all.
    """
    if not isinstance(payload, dict):
        raise CorruptionError(f"Snapshot document must be a mapping, got {type(payload).__name__}")

    for key in ("schema_version", "schemaVersion"):
        if key in payload:
            version = payload[key]
            if isinstance(version, bool) or not isinstance(version, int):
                raise CorruptionError(f"Invalid snapshot schema version: {version!r}")
            return version

    if "projectName" in payload:
        return LEGACY_SCHEMA_VERSION

    raise CorruptionError("Unrecognized snapshot document: no schema version and no projectName")

def load_schema(schema_version: int) -> Dict[str, Any]:
    """
    Loads the JSON schema for a snapshot schema version.

    The current version's schema is generated from the VersionSnapshot model;
    older versions ship as JSON files inside the package.

    Raises:
        FatalError: If no schema exists for the version.
    """
    if schema_version == SNAPSHOT_SCHEMA_VERSION:
        schema = VersionSnapshot.model_json_schema(by_alias=False)
        schema["$schema"] = "https://json-schema.org/draft/2020-12/schema"
        return schema

    schema_file = files("ganttcore") / "schemas" / f"v{schema_version}" / "snapshot.schema.json"
    if not schema_file.is_file():
        raise FatalError(f"No snapshot schema for version {schema_version}")

    log.debug(f"Loading schema from: {schema_file}")
    return json.loads(schema_file.read_text(encoding="utf-8"))

def validate_payload(payload: Dict[str, Any], schema_version: int) -> bool:
    """
    Validates a raw snapshot document against the schema of its version.

    Raises:
        CorruptionError: If the document does not match the schema.
        FatalError: If the schema itself is broken.
    """
    schema = load_schema(schema_version)
    try:
        validate(instance=payload, schema=schema)
    except ValidationError as e:
        path = "/".join(str(p) for p in e.absolute_path) or "<root>"
        error_msg = f"Snapshot does not match schema v{schema_version} at {path}: {e.message}"
        log.error(error_msg)
        raise CorruptionError(error_msg) from e
    except SchemaError as e:
        error_msg = f"Snapshot schema v{schema_version} is invalid: {e.message}"
        log.critical(error_msg)
        raise FatalError(error_msg) from e

    log.debug(f"Snapshot validated against schema v{schema_version}")
    return True
