import logging
import os
import sys
from pathlib import Path

ROOT_LOGGER = 'ganttcore'
LOG_FILE_NAME = 'ganttcore.log'

DETAILED_FORMAT = '[%(asctime)s] %(levelname)-8s [%(name)s:%(funcName)s:%(lineno)d] %(message)s'
DEBUG_CONSOLE_FORMAT = '%(levelname)-8s [%(name)s] %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def _debug_enabled() -> bool:
    return os.getenv('GANTTCORE_DEBUG', '').lower() in ('1', 'true', 'yes')

def _console_level() -> int:
    """DEBUG when GANTTCORE_DEBUG is set, else GANTTCORE_LOG_LEVEL, else WARNING."""
    if _debug_enabled():
        return logging.DEBUG
    name = os.getenv('GANTTCORE_LOG_LEVEL', '').upper()
    level = logging.getLevelName(name) if name else logging.WARNING
    # getLevelName returns a "Level X" string for unknown names
    return level if isinstance(level, int) else logging.WARNING

def _file_handler(log_dir: str) -> logging.Handler:
    path = Path(log_dir).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path / LOG_FILE_NAME, encoding='utf-8')
    handler.setFormatter(logging.Formatter(DETAILED_FORMAT, DATE_FORMAT))
    handler.setLevel(logging.DEBUG)
    return handler

def setup_logging():
    """
    Configure the ganttcore logger tree from the environment.

    Console output goes to stderr so CLI output on stdout stays parseable.
    A detailed log file is written only when GANTTCORE_LOG_DIR is set.
    """
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(
        DEBUG_CONSOLE_FORMAT if _debug_enabled() else CONSOLE_FORMAT
    ))
    console_handler.setLevel(_console_level())

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG)  # Logger accepts all, handlers filter
    logger.handlers.clear()
    logger.addHandler(console_handler)

    log_dir = os.getenv('GANTTCORE_LOG_DIR', '')
    if log_dir:
        logger.addHandler(_file_handler(log_dir))

    logger.propagate = False
    return logger

# Initialize logging when package is imported
setup_logging()

def get_logger(name: str = None):
    """Get a logger instance for a specific module."""
    if name:
        return logging.getLogger(f'{ROOT_LOGGER}.{name}')
    return logging.getLogger(ROOT_LOGGER)
