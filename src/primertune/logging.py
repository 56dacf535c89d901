# ================================================================================
# Logging configuration using loguru
#
# Engine modules log through `from loguru import logger` and never install
# sinks themselves; the command-line interface calls configure_logging, and
# configure_file_logging when --log-dir is given.
# ================================================================================

import sys
from datetime import datetime
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def configure_logging(level: str = "INFO") -> None:
    """
    Replace the default handler with a coloured console handler on stderr.

    Args:
        level: Minimum level shown, e.g. "DEBUG", "INFO" or "WARNING".
    """
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level.upper(), colorize=True)


def configure_file_logging(log_dir: str | Path = ".") -> str:
    """
    Configure file logging with a timestamped log file.

    Args:
        log_dir: Directory to write log files to. Defaults to current directory.

    Returns:
        Path to the log file.
    """
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    log_filename = str(Path(log_dir) / f"primertune_{timestamp}.log")

    logger.add(
        log_filename,
        format=FILE_FORMAT,
        level="DEBUG",
        rotation="10 MB",
    )

    return log_filename


# Re-export logger for convenient imports
__all__ = ["logger", "configure_logging", "configure_file_logging"]
