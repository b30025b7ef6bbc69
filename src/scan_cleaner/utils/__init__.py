"""Scan cleaner utility modules."""

from .logging_utils import (
    setup_logging, setup_logging_from_config, get_logger, log_performance,
    track_batch, configure_opencv_logging,
)

__all__ = [
    'setup_logging', 'setup_logging_from_config', 'get_logger', 'log_performance',
    'track_batch', 'configure_opencv_logging',
]
