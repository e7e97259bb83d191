"""
Logging configuration for gurl.

Standard output carries the HTTP response, so console logging goes to
standard error. `--log-file` adds a small rotating file log.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"

LOG_FILE_MAX_BYTES = 1048576  # 1MB
LOG_FILE_BACKUPS = 3


def configure_logging(debug: bool = False, log_file: str | None = None) -> logging.Logger:
    """
    Configure the `gurl` logger from CLI flags.

    Args:
        debug: Log at DEBUG instead of WARNING
        log_file: Also append records to this file

    Returns:
        The configured `gurl` logger
    """
    logger = logging.getLogger("gurl")
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
