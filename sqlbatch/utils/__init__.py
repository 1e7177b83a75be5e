"""
Utilities package for sqlbatch.

Exports shared helpers for logging and profiling. Keep this package
lightweight and free of batching logic.
"""

from sqlbatch.utils.logging import ConsoleFormatter, configure_logging, get_logger
from sqlbatch.utils.profiler import ProfileStats, profile_block

__all__ = [
    "ConsoleFormatter",
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
