"""
Logging setup for the scan cleaner.

Console output goes through rich unless plain text is requested; an optional
log file records everything at DEBUG. Batch timings are reported on the
``performance`` logger at the custom PERFORMANCE level.
"""

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Optional, Union

import cv2
from rich.console import Console
from rich.logging import RichHandler

from ..exceptions import ConfigurationError

console = Console()

PERFORMANCE_LEVEL = 25
PERFORMANCE_LOGGER = "performance"
logging.addLevelName(PERFORMANCE_LEVEL, "PERFORMANCE")

_PLAIN_FORMATS = {
    "minimal": "%(asctime)s - %(levelname)s - %(message)s",
    "simple": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s - %(message)s",
}
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ConfigurationError("Unknown logging level", {"level": level})
    return resolved


def _console_handler(use_rich: bool, format_style: str) -> logging.Handler:
    if use_rich:
        # markup off: file names and stats dicts may contain square brackets
        handler = RichHandler(
            console=console,
            show_path=format_style == "detailed",
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        return handler

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_PLAIN_FORMATS[format_style], _DATE_FORMAT))
    return handler


def setup_logging(
    level: Union[str, int] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    use_rich: bool = True,
    include_performance: bool = True,
    format_style: str = "detailed"
) -> logging.Logger:
    """
    Route scan cleaner logs to the console and, optionally, a log file.

    Replaces any handlers already on the root logger, so it can be called
    again once a configuration file has been read.

    Args:
        level: Console level (name or number)
        log_file: File that receives every record down to DEBUG
        use_rich: Rich console output instead of plain text
        include_performance: Keep PERFORMANCE records from batch timings
        format_style: 'minimal', 'simple' or 'detailed'

    Returns:
        The root logger

    Raises:
        ConfigurationError: If the level or format style is unknown
    """
    if format_style not in _PLAIN_FORMATS:
        raise ConfigurationError("Unknown logging format style", {"format_style": format_style})
    level = _resolve_level(level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG if log_file else level)

    console_handler = _console_handler(use_rich, format_style)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_PLAIN_FORMATS["detailed"], _DATE_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)

    logging.getLogger(PERFORMANCE_LOGGER).disabled = not include_performance

    return root_logger


def setup_logging_from_config(logging_config: Any, **overrides: Any) -> logging.Logger:
    """Apply a :class:`LoggingConfig`; non-None keyword overrides win."""
    settings = logging_config.model_dump(mode="json")
    settings.update({key: value for key, value in overrides.items() if value is not None})
    return setup_logging(**settings)


def get_logger(name: str) -> logging.Logger:
    """Module logger; use ``get_logger(__name__)``."""
    return logging.getLogger(name)


def log_performance(message: str, **metrics: Any) -> None:
    """Emit ``message (key=value, ...)`` at PERFORMANCE on the performance logger."""
    if metrics:
        message = f"{message} ({', '.join(f'{k}={v}' for k, v in metrics.items())})"
    logging.getLogger(PERFORMANCE_LOGGER).log(PERFORMANCE_LEVEL, message)


@contextmanager
def track_batch(
    operation: str,
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO
) -> Generator[Dict[str, Any], None, None]:
    """
    Time a batch of image cleanings and log how it went.

    The caller fills ``files_processed`` and ``files_failed`` in the yielded
    dict; ``duration`` and ``success_rate`` are added on a normal exit.
    """
    logger = logger or logging.getLogger()
    stats: Dict[str, Any] = {"operation": operation, "files_processed": 0, "files_failed": 0}

    logger.log(level, f"Starting {operation}")
    started = time.perf_counter()
    try:
        yield stats
    except Exception as e:
        logger.error(f"{operation} aborted after {time.perf_counter() - started:.2f}s: {e}")
        raise

    duration = time.perf_counter() - started
    attempted = stats["files_processed"] + stats["files_failed"]
    stats["duration"] = duration
    stats["success_rate"] = stats["files_processed"] / attempted if attempted else 0.0

    logger.log(
        level,
        f"Finished {operation}: {stats['files_processed']} cleaned, "
        f"{stats['files_failed']} failed in {duration:.2f}s"
    )
    log_performance(
        operation,
        duration=round(duration, 3),
        images_per_second=round(stats["files_processed"] / duration, 3) if duration > 0 else 0,
    )


def configure_opencv_logging(level: int = logging.WARNING) -> None:
    """Set OpenCV's native log threshold to match a Python logging level."""
    cv_logging = cv2.utils.logging
    if level <= logging.DEBUG:
        cv_level = cv_logging.LOG_LEVEL_DEBUG
    elif level <= logging.INFO:
        cv_level = cv_logging.LOG_LEVEL_INFO
    elif level <= logging.WARNING:
        cv_level = cv_logging.LOG_LEVEL_WARNING
    else:
        cv_level = cv_logging.LOG_LEVEL_ERROR
    cv_logging.setLogLevel(cv_level)
