"""
Logging configuration for the studio service.

Every module logs through a child of the ``studio`` logger. Output goes to
the console and to a daily-rotated file in ``LOG_DIR`` that keeps
``LOG_RETENTION_DAYS`` days of history.
"""
import os
import logging
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime, timedelta
from pathlib import Path


LOGS_DIR = os.getenv("LOG_DIR", os.path.join(os.path.dirname(os.path.dirname(__file__)), "logs"))
LOG_FILE_NAME = "studio.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_RETENTION_DAYS = 10
ROOT_LOGGER_NAME = "studio"


def _level_from_env(default: int = logging.INFO) -> int:
    """Resolve LOG_LEVEL (name or number) to a logging level."""
    raw = os.getenv("LOG_LEVEL", "")
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default


def cleanup_old_logs(directory: str, retention_days: int = LOG_RETENTION_DAYS) -> int:
    """Remove rotated log files older than retention_days.

    Returns:
        Number of files deleted
    """
    log_dir = Path(directory)
    if not log_dir.exists():
        return 0

    cutoff = datetime.now() - timedelta(days=retention_days)
    deleted_count = 0
    for log_file in log_dir.glob(f"{LOG_FILE_NAME}.*"):
        if not log_file.is_file():
            continue
        # Rotated files are suffixed with YYYY-MM-DD; fall back to mtime otherwise
        try:
            file_date = datetime.strptime(log_file.name.replace(f"{LOG_FILE_NAME}.", ""), "%Y-%m-%d")
        except ValueError:
            file_date = datetime.fromtimestamp(log_file.stat().st_mtime)
        if file_date < cutoff:
            try:
                log_file.unlink()
                deleted_count += 1
            except OSError as e:
                logging.getLogger(ROOT_LOGGER_NAME).error(f"Failed to delete log file {log_file.name}: {e}")
    return deleted_count


def setup_logger(name: str = ROOT_LOGGER_NAME, level: int = None, log_dir: str = LOGS_DIR) -> logging.Logger:
    """
    Set up logger with file rotation and console output.

    Args:
        name: Logger name
        level: Logging level (default: LOG_LEVEL env var, else INFO)
        log_dir: Directory for the rotated log file

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    if level is None:
        level = _level_from_env()
    logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(message)s", "%H:%M:%S")
    )
    logger.addHandler(console_handler)

    try:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            os.path.join(log_dir, LOG_FILE_NAME),
            when="midnight",
            interval=1,
            backupCount=LOG_RETENTION_DAYS,
            encoding="utf-8",
            utc=True
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        logger.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"File logging disabled, cannot write to {log_dir}: {e}")
        return logger

    deleted = cleanup_old_logs(log_dir, LOG_RETENTION_DAYS)
    if deleted:
        logger.info(f"Cleaned up {deleted} old log file(s)")

    return logger


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (if None, returns the root studio logger)

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


app_logger = setup_logger()
