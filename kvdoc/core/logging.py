"""
Logging setup — console plus a dated log file under ~/.kvdoc/logs.

The library itself only creates module loggers; handlers are attached
here by applications (the CLI calls this on startup).
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path


def setup_logging(
    log_dir: Path | None = None,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
    file_enabled: bool = True,
) -> logging.Logger:
    """
    Setup kvdoc logging.

    Args:
        log_dir: Directory for log files (default: ~/.kvdoc/logs)
        console_level: Minimum level for console output
        file_level: Minimum level for file output
        file_enabled: Write the dated log file at all

    Returns:
        The configured logger
    """
    logger = logging.getLogger("kvdoc")
    logger.setLevel(logging.DEBUG)

    # Clear existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Console handler (minimal output)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(console_handler)

    if not file_enabled:
        return logger

    log_dir = (log_dir or Path.home() / ".kvdoc" / "logs").expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)

    # File handler (detailed output)
    log_file = log_dir / f"kvdoc_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(file_handler)

    logger.info(f"Logging initialized. File: {log_file}")

    return logger
