from __future__ import annotations

"""
Logging Configuration Model.

The update CLI logs its progress to stderr and, on request, to a rotating
file kept in the user data directory. Update runs are short, so the file
keeps a small history of previous attempts rather than a large volume.
"""

import logging
from dataclasses import dataclass
from typing import Optional

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LoggingConfig:
    """
    Settings for configure_logging().

    Attributes:
        level: Minimum severity name; unknown names fall back to INFO.
        console: Write records to stderr.
        log_file: Rotating log file, if any.
        max_bytes: Size of one log segment.
        backup_count: Previous segments kept next to the active one.
        console_fmt: Terminal format; stdout stays reserved for results.
        file_fmt: File format, with timestamp and logger name.
        datefmt: Timestamp format.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 256 * 1024
    backup_count: int = 5

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def for_cli(cls, debug: bool = False, log_file: Optional[str] = None) -> LoggingConfig:
        """Configuration used by the selfupdate command."""
        return cls(level="DEBUG" if debug else "INFO", log_file=log_file)

    @property
    def level_value(self) -> int:
        """Numeric level of ``level``."""
        name = (self.level or "").strip().upper()
        if name not in LEVEL_NAMES:
            return logging.INFO
        return getattr(logging, name)
