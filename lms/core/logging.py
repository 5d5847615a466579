# /lms/core/logging.py

"""
Logging configuration for the LMS backend.

Every module logs through `logging.getLogger(__name__)`; this module only
wires handlers onto the root logger once, at application startup.
"""

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class ConsoleFormatter(logging.Formatter):
    """Format: [TIMESTAMP] LEVEL LOGGER:FUNCTION:LINE - MESSAGE"""

    def format(self, record: logging.LogRecord) -> str:
        formatted = (
            f"[{datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')}] "
            f"{record.levelname:8} {record.name}:{record.funcName}:{record.lineno} - "
            f"{record.getMessage()}"
        )
        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"
        return formatted


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Attach a console handler (and optionally a rotating file handler) to the
    root logger. Calling it again replaces the handlers it installed before.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root.handlers):
        if getattr(handler, "_lms_handler", False):
            root.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(ConsoleFormatter())
    console._lms_handler = True
    root.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_file_size, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(ConsoleFormatter())
        file_handler._lms_handler = True
        root.addHandler(file_handler)

    # SQLAlchemy echoes every statement at INFO; keep it quiet unless debugging.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
