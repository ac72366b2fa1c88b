"""Root logger setup for the API server and the CLI.

Level and log file come from ``Settings.log_level`` / ``Settings.log_file``.
The server logs to stdout and a file; one-shot commands pass no file.
"""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers, kept at WARNING unless running at DEBUG
QUIET_LOGGERS = ("botocore", "boto3", "urllib3", "aiosqlite")


def resolve_level(name: str) -> int:
    """Translate a level name ("info", "WARNING") into a logging constant.

    Unknown names fall back to INFO.
    """
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Replace the root logger's handlers.

    Args:
        level: Level name, usually ``Settings.log_level``
        log_file: Also write to this file (parent directories are created)
    """
    log_level = resolve_level(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(log_level)
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    quiet_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)


__all__ = ["configure_logging", "resolve_level"]
