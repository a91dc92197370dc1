# src/fxbackend/shared/logging_conf.py
"""
Logging Configuration - Logging Setup for the Backend Process

Library modules only create their own `logging.getLogger(__name__)`
loggers; the routing host or fxbackend.app calls setup_logging once with
values from Settings (LOG_LEVEL, LOG_FILE, LOG_DIR, FXBACKEND_LOG_STDOUT,
LOG_MAX_BYTES, LOG_BACKUP_COUNT).

Files that USE this module:
- fxbackend.app (main configures logging from settings)
- tests.test_settings (unit tests)
"""
import logging
import sys
from pathlib import Path
from typing import List, Optional, Union
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "fxbackend.log"


def _log_file_path(
    log_file: Optional[Union[str, Path]],
    log_dir: Optional[Union[str, Path]],
) -> Optional[Path]:
    """LOG_DIR wins over LOG_FILE; the parent directory is created."""
    if log_dir:
        path = Path(log_dir) / LOG_FILE_NAME
    elif log_file:
        path = Path(log_file)
    else:
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    log_dir: Optional[Union[str, Path]] = None,
    stdout: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> Optional[Path]:
    """
    Configure root logging for the backend process.

    Args:
        level: Level number or name such as "DEBUG"
        log_file: Path of a rotating log file
        log_dir: Directory for fxbackend.log (takes precedence over log_file)
        stdout: Also log to stdout; stdout is used anyway when no file is configured
        max_bytes: Size at which the log file rotates
        backup_count: Rotated files to keep

    Returns:
        Path of the log file, or None when logging only to stdout
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    handlers: List[logging.Handler] = []

    file_path = _log_file_path(log_file, log_dir)
    if file_path is not None:
        handlers.append(RotatingFileHandler(
            file_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        ))
    if stdout or not handlers:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers, force=True)

    logging.getLogger(__name__).info(
        "Logging configured: file=%s, stdout=%s, level=%s",
        file_path, stdout or file_path is None, logging.getLevelName(level),
    )
    return file_path
