"""Loguru setup for the gotest-report command line."""

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(level: str = "INFO", log_file: Optional[Union[str, Path]] = None) -> None:
    """
    Route log records to stderr and, optionally, to a file.

    Stdout is left untouched because the report itself may be written there.

    Args:
        level: Minimum level for both sinks
        log_file: Optional path of a log file (rotated at 10 MB)
    """
    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT)
    if log_file:
        logger.add(str(log_file), level=level, format=FILE_FORMAT, rotation="10 MB")
