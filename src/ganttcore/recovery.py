class GanttError(Exception):
    """Base exception for all ganttcore errors."""
    pass

class RecoverableError(GanttError):
    """An error that can be recovered from without data loss."""
    pass

class FatalError(GanttError):
    """A caller contract violation or corrupt input; not a runtime condition to retry."""
    pass

class UnsupportedScaleError(FatalError, ValueError):
    """Time scale outside day/week/sprint/month/quarter."""
    pass

class TaskContractError(FatalError, ValueError):
    """Task handed to the core with an impossible date range."""
    pass

class DragInProgressError(FatalError):
    """Pointer-down received while a drag gesture is still active."""
    pass

class CorruptionError(FatalError):
    """Corrupted Data Error - from syntax errors in data formats, to just unknown data"""
    pass

class MigrationError(CorruptionError):
    """Snapshot migration failed - data may be corrupted."""
    pass

class FileOperationError(RecoverableError):
    """File operation failed but can be retried."""
    pass

class MigrationNeededError(RecoverableError):
    """ Data is valid, but may need a migration """
    pass
