"""
Utility modules for the logistics ERP core.
"""

from .logger import (
    setup_logging,
    reset_logging,
    get_logger,
    get_performance_logger,
    set_log_level,
    get_log_stats,
    log_performance,
    log_exceptions,
    PerformanceLogger,
    LoggerSetup
)

__all__ = [
    'setup_logging',
    'reset_logging',
    'get_logger',
    'get_performance_logger',
    'set_log_level',
    'get_log_stats',
    'log_performance',
    'log_exceptions',
    'PerformanceLogger',
    'LoggerSetup'
]
