VERSION = "0.3.0"

# Version of the snapshot document schema written by save_snapshot().
SNAPSHOT_SCHEMA_VERSION = 2
