"""Logging configuration for the IPC process.

Provides dual output (stderr + file) at the level configured in Settings.log_level.
Default: INFO. stdout is reserved for IPC responses, so the console handler
writes to stderr.
"""

import logging
import sys
from pathlib import Path

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level(level: str = "INFO") -> int:
    """Map a level name (case-insensitive) to its logging constant.

    Returns:
        Logging level constant; unknown names give INFO
    """
    level_str = (level or "INFO").upper()
    return LOG_LEVEL_MAP.get(level_str, logging.INFO)


def setup_logging(log_file: str = "logs/schooldesk.log", level: str = "INFO") -> None:
    """
    Configure root logger for the IPC process.

    Args:
        log_file: Path to log file (default: logs/schooldesk.log)
        level: Level name, normally Settings.log_level

    Behavior:
        - Console handler on stderr, file handler on log_file
        - ISO format timestamps: [YYYY-MM-DD HH:MM:SS]
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    log_level = get_log_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)
