"""Logging setup for jaskmoney.

Standard Logger Initialization Pattern
--------------------------------------
Modules use the standard Python pattern and leave configuration to the
entry point:

    import logging
    logger = logging.getLogger(__name__)

The CLI calls ``setup_logging`` to log to stderr. The TUI calls
``setup_file_logging`` instead, since writing to the terminal would corrupt
the screen.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from jaskmoney.config.constants import JASKMONEY_CONFIG_DIR, LOG_FILENAME

# Max log file size: 5MB, keep 2 backups
_MAX_LOG_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 2

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_ROOT = "jaskmoney"


def _configure(handler: logging.Handler, level: int) -> logging.Logger:
    logger = logging.getLogger(_ROOT)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Send jaskmoney logs to stderr at a level chosen by CLI flags."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    return _configure(logging.StreamHandler(sys.stderr), level)


def setup_file_logging(log_dir: Optional[Path] = None, level: int = logging.INFO) -> Path:
    """Send jaskmoney logs to a rotating file and return its path."""
    log_dir = log_dir or JASKMONEY_CONFIG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILENAME
    handler = RotatingFileHandler(log_file, maxBytes=_MAX_LOG_BYTES, backupCount=_BACKUP_COUNT)
    _configure(handler, level)
    return log_file
