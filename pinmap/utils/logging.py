"""
Logging for the pinmap viewer.

Everything the viewer reports goes through loguru. trimesh and httpx log
through the standard library; their loggers are kept at WARNING unless the
viewer itself runs at DEBUG.
"""

import logging
import os
import sys
from pathlib import Path

from loguru import logger

from pinmap.config import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"

# Third-party loggers that are noisy at INFO while loading models and fetching assets
LIBRARY_LOGGERS = ("trimesh", "httpx", "httpcore")


def quiet_libraries(level: str) -> None:
    library_level = logging.DEBUG if level.upper() == "DEBUG" else logging.WARNING
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)


def setup_logging(
    level: str | None = None,
    log_file: Path | None = None,
    serialize: bool | None = None,
    rotation: str = "10 MB",
    retention: int = 5,
) -> list[int]:
    """
    Replace loguru's handlers with the viewer's console and file sinks.

    Args:
        level: Log level, defaults to ``PINMAP_LOG_LEVEL``
        log_file: Log file path, defaults to ``PINMAP_LOG_FILE`` (none when unset)
        serialize: Write the file as JSON lines, defaults to ``PINMAP_LOG_JSON``
        rotation: Size or age at which the file is rotated
        retention: Number of rotated files to keep

    Returns:
        The ids of the handlers that were added
    """
    viewer = settings.viewer
    level = (level or viewer.log_level).upper()
    log_file = log_file or viewer.log_file
    serialize = viewer.log_json if serialize is None else serialize

    logger.remove()
    handler_ids = [logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)]

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler_ids.append(logger.add(
            log_file,
            level=level,
            format=FILE_FORMAT,
            serialize=serialize,
            rotation=rotation,
            retention=retention,
        ))

    quiet_libraries(level)
    logger.debug(f"Logging configured: level={level} file={log_file or '-'}")
    return handler_ids


if os.environ.get("DISABLE_LOGGING") != "1":
    setup_logging()
