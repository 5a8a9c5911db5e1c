"""
Logging system for the logistics ERP core.

Provides console and rotating file logging, JSON output for log shippers and
lightweight performance timing.
"""

import os
import sys
import logging
import logging.handlers
import time
import functools
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from contextlib import contextmanager

try:
    import structlog
    from pythonjsonlogger.json import JsonFormatter
except ImportError as e:
    print(f"Missing required logging dependencies: {e}")
    print("Please install: pip install structlog python-json-logger")
    sys.exit(1)


ROOT_LOGGER_NAME = "logistics_erp"

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
JSON_FORMAT = '%(asctime)s %(name)s %(levelname)s %(module)s %(funcName)s %(lineno)d %(message)s'


class PerformanceLogger:
    """Logger for tracking performance metrics."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    @contextmanager
    def timer(self, operation: str, **kwargs):
        """Context manager for timing operations."""
        start_time = time.perf_counter()

        try:
            yield
        finally:
            duration = time.perf_counter() - start_time

            self.logger.info(
                "Performance metric",
                extra={
                    "operation": operation,
                    "duration_seconds": round(duration, 4),
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    **kwargs
                }
            )


class MultiLineFormatter(logging.Formatter):
    """Formatter for human-readable logs with selected extra fields appended."""

    EXTRA_LABELS = (
        ('duration_seconds', 'Duration', 's'),
        ('operation', 'Operation', ''),
        ('log_entry_id', 'Log entry', ''),
        ('employee_id', 'Employee', ''),
    )

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        extra_info = [
            f"{label}: {getattr(record, attr)}{suffix}"
            for attr, label, suffix in self.EXTRA_LABELS
            if hasattr(record, attr)
        ]

        if extra_info:
            formatted += f" | {' | '.join(extra_info)}"

        return formatted


class LoggerSetup:
    """Main logger setup and configuration."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize logger setup.

        Args:
            config: Configuration dictionary (optional, will use environment if None)
        """
        self.config = config or self._load_config_from_env()
        self.performance_loggers: Dict[str, PerformanceLogger] = {}
        self._setup_complete = False

    def setup_logging(self) -> logging.Logger:
        """
        Setup the logging system.

        Returns:
            Main application logger
        """
        main_logger = logging.getLogger(ROOT_LOGGER_NAME)
        if self._setup_complete:
            return main_logger

        level = getattr(logging, self.config.get('level', 'INFO'))
        main_logger.setLevel(level)
        main_logger.handlers.clear()

        if self.config.get('enable_file_logging', False):
            self._setup_file_logging(main_logger)

        if self.config.get('enable_console_logging', True):
            self._setup_console_logging(main_logger)

        if self.config.get('enable_json_logging', False):
            self._setup_structured_logging()

        self.performance_loggers['main'] = PerformanceLogger(main_logger)
        self._setup_complete = True

        main_logger.debug(
            "Logging system initialized",
            extra={"logging_config": dict(self.config)}
        )

        return main_logger

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get a logger for a specific component.

        Args:
            name: Component name

        Returns:
            Logger under the application logger
        """
        if name.startswith(ROOT_LOGGER_NAME):
            return logging.getLogger(name)
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    def get_performance_logger(self, name: str = 'main') -> PerformanceLogger:
        """
        Get performance logger for a component.

        Args:
            name: Component name

        Returns:
            PerformanceLogger instance
        """
        if name not in self.performance_loggers:
            self.performance_loggers[name] = PerformanceLogger(self.get_logger(name))

        return self.performance_loggers[name]

    def _build_formatter(self, console: bool = False) -> logging.Formatter:
        if self.config.get('enable_json_logging', False):
            return JsonFormatter(JSON_FORMAT)
        if console:
            return logging.Formatter(fmt=DEFAULT_FORMAT, datefmt='%H:%M:%S')
        return MultiLineFormatter(
            fmt=self.config.get('format', DEFAULT_FORMAT),
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def _setup_file_logging(self, logger: logging.Logger):
        """Setup rotating file logging."""
        log_file = self.config.get('log_file', 'logs/logistics_erp.log')

        log_dir = os.path.dirname(log_file)
        if log_dir:
            Path(log_dir).mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=self.config.get('max_bytes', 10 * 1024 * 1024),
            backupCount=self.config.get('backup_count', 5),
            encoding='utf-8'
        )
        file_handler.setFormatter(self._build_formatter())
        file_handler.setLevel(getattr(logging, self.config.get('level', 'INFO')))

        logger.addHandler(file_handler)

    def _setup_console_logging(self, logger: logging.Logger):
        """Setup console logging on stderr, keeping stdout for command output."""
        console_handler = logging.StreamHandler(sys.stderr)

        console_level = self.config.get('console_level', self.config.get('level', 'INFO'))
        console_handler.setLevel(getattr(logging, console_level))
        console_handler.setFormatter(self._build_formatter(console=True))

        logger.addHandler(console_handler)

    def _setup_structured_logging(self):
        """Setup structlog so structlog loggers render through the stdlib handlers."""
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer()
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    def _load_config_from_env(self) -> Dict[str, Any]:
        """Load logging configuration from environment variables."""
        return {
            'level': os.getenv('LOG_LEVEL', 'INFO').upper(),
            'format': os.getenv('LOG_FORMAT', DEFAULT_FORMAT),
            'enable_file_logging': os.getenv('LOG_ENABLE_FILE_LOGGING', 'false').lower() == 'true',
            'log_file': os.getenv('LOG_LOG_FILE', 'logs/logistics_erp.log'),
            'max_bytes': int(os.getenv('LOG_MAX_BYTES', str(10 * 1024 * 1024))),
            'backup_count': int(os.getenv('LOG_BACKUP_COUNT', '5')),
            'enable_console_logging': os.getenv('LOG_ENABLE_CONSOLE_LOGGING', 'true').lower() == 'true',
            'console_level': os.getenv('LOG_CONSOLE_LEVEL', 'INFO').upper(),
            'enable_json_logging': os.getenv('LOG_ENABLE_JSON_LOGGING', 'false').lower() == 'true',
        }

    def set_log_level(self, level: str):
        """Dynamically change log level."""
        log_level = getattr(logging, level.upper())

        main_logger = logging.getLogger(ROOT_LOGGER_NAME)
        main_logger.setLevel(log_level)
        for handler in main_logger.handlers:
            handler.setLevel(log_level)

        self.config['level'] = level.upper()

    def get_log_stats(self) -> Dict[str, Any]:
        """Get logging system statistics."""
        stats = {
            'handlers': [],
            'level': self.config.get('level', 'INFO'),
            'performance_loggers': list(self.performance_loggers.keys())
        }

        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler_info = {
                'type': type(handler).__name__,
                'level': logging.getLevelName(handler.level)
            }

            if hasattr(handler, 'baseFilename'):
                handler_info['file'] = handler.baseFilename

            stats['handlers'].append(handler_info)

        return stats


# Global logger setup instance
_logger_setup: Optional[LoggerSetup] = None


def setup_logging(config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Setup application logging.

    Args:
        config: Optional logging configuration

    Returns:
        Main application logger
    """
    global _logger_setup

    if _logger_setup is None:
        _logger_setup = LoggerSetup(config)

    return _logger_setup.setup_logging()


def reset_logging():
    """Forget the current setup so the next setup_logging call starts fresh."""
    global _logger_setup

    _logger_setup = None

    main_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(main_logger.handlers):
        main_logger.removeHandler(handler)
        handler.close()
    main_logger.setLevel(logging.NOTSET)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific component.

    Args:
        name: Component name

    Returns:
        Logger instance
    """
    if _logger_setup is None:
        setup_logging()

    return _logger_setup.get_logger(name)


def get_performance_logger(name: str = 'main') -> PerformanceLogger:
    """
    Get performance logger.

    Args:
        name: Component name

    Returns:
        PerformanceLogger instance
    """
    if _logger_setup is None:
        setup_logging()

    return _logger_setup.get_performance_logger(name)


def set_log_level(level: str):
    """Set global log level."""
    if _logger_setup is None:
        setup_logging()

    _logger_setup.set_log_level(level)


def get_log_stats() -> Dict[str, Any]:
    """Get logging system statistics."""
    if _logger_setup is None:
        return {}

    return _logger_setup.get_log_stats()


def log_performance(operation: Optional[str] = None):
    """Decorator to log function performance."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            perf_logger = get_performance_logger()
            op_name = operation or f"{func.__module__}.{func.__name__}"

            with perf_logger.timer(op_name):
                return func(*args, **kwargs)

        return wrapper
    return decorator


def log_exceptions(logger_name: Optional[str] = None):
    """Decorator to log exceptions before re-raising them."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(logger_name or func.__module__)

            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.exception(
                    f"Exception in {func.__name__}",
                    extra={
                        "function": func.__name__,
                        "exception_type": type(e).__name__,
                    }
                )
                raise

        return wrapper
    return decorator
