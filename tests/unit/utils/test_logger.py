"""
Unit tests for the logging system.
"""

import json
import logging
import logging.handlers

import pytest
from unittest.mock import patch

from pythonjsonlogger.json import JsonFormatter

from logistics_erp.utils.logger import (
    LoggerSetup, MultiLineFormatter, ROOT_LOGGER_NAME, setup_logging, reset_logging,
    get_logger, get_performance_logger, set_log_level, get_log_stats,
    log_performance, log_exceptions
)


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


def file_config(tmp_path, **overrides):
    config = {
        'level': 'DEBUG',
        'enable_file_logging': True,
        'log_file': str(tmp_path / "logs" / "erp.log"),
        'enable_console_logging': False,
        'enable_json_logging': False,
    }
    config.update(overrides)
    return config


def read_log(tmp_path):
    for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
        handler.flush()
    return (tmp_path / "logs" / "erp.log").read_text(encoding='utf-8')


class TestLoggerSetup:
    """Test LoggerSetup configuration."""

    def test_file_logging(self, tmp_path):
        setup_logging(file_config(tmp_path))

        get_logger("hr").info("Reassigned manager", extra={"employee_id": "E-1"})

        content = read_log(tmp_path)
        assert "logistics_erp.hr" in content
        assert "Reassigned manager" in content
        assert "Employee: E-1" in content

    def test_json_logging(self, tmp_path):
        setup_logging(file_config(tmp_path, enable_json_logging=True))

        get_logger("notifications").warning("Delivery failed", extra={"log_entry_id": "abc"})

        handler = logging.getLogger(ROOT_LOGGER_NAME).handlers[0]
        assert isinstance(handler.formatter, JsonFormatter)

        record = json.loads(read_log(tmp_path).strip().splitlines()[-1])
        assert record["message"] == "Delivery failed"
        assert record["log_entry_id"] == "abc"
        assert record["levelname"] == "WARNING"

    def test_console_only_by_default(self):
        with patch.dict('os.environ', {}, clear=True):
            main_logger = setup_logging()

        handlers = main_logger.handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.StreamHandler)
        assert not isinstance(handlers[0], logging.handlers.RotatingFileHandler)

    def test_config_from_environment(self):
        env = {'LOG_LEVEL': 'warning', 'LOG_ENABLE_JSON_LOGGING': 'true'}
        with patch.dict('os.environ', env, clear=True):
            setup = LoggerSetup()

        assert setup.config['level'] == 'WARNING'
        assert setup.config['enable_json_logging'] is True

    def test_setup_is_idempotent(self, tmp_path):
        setup_logging(file_config(tmp_path))
        setup_logging(file_config(tmp_path))

        assert len(logging.getLogger(ROOT_LOGGER_NAME).handlers) == 1

    def test_get_logger_names(self):
        setup = LoggerSetup({'level': 'INFO', 'enable_console_logging': False})

        assert setup.get_logger("cli").name == "logistics_erp.cli"
        assert setup.get_logger("logistics_erp.hr.hierarchy").name == "logistics_erp.hr.hierarchy"

    def test_set_log_level(self, tmp_path):
        setup_logging(file_config(tmp_path))

        set_log_level("error")

        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.ERROR
        assert get_log_stats()['level'] == 'ERROR'

    def test_log_stats(self, tmp_path):
        assert get_log_stats() == {}

        setup_logging(file_config(tmp_path))
        stats = get_log_stats()

        assert stats['handlers'][0]['type'] == 'RotatingFileHandler'
        assert stats['handlers'][0]['file'].endswith("erp.log")
        assert 'main' in stats['performance_loggers']


class TestMultiLineFormatter:
    """Test the human-readable formatter."""

    def test_appends_known_extras(self):
        formatter = MultiLineFormatter(fmt='%(message)s')
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "Timed", None, None)
        record.operation = "stats"
        record.duration_seconds = 0.25

        assert formatter.format(record) == "Timed | Duration: 0.25s | Operation: stats"

    def test_plain_record(self):
        formatter = MultiLineFormatter(fmt='%(message)s')
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "Plain", None, None)

        assert formatter.format(record) == "Plain"


class TestPerformanceLogging:
    """Test performance timing helpers."""

    def test_timer_logs_duration(self, tmp_path):
        setup_logging(file_config(tmp_path))

        with get_performance_logger("stats").timer("calculate_stats", entries=3):
            pass

        content = read_log(tmp_path)
        assert "Performance metric" in content
        assert "Operation: calculate_stats" in content

    def test_log_performance_decorator(self, tmp_path):
        setup_logging(file_config(tmp_path))

        @log_performance("summing")
        def add(a, b):
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"
        assert "Operation: summing" in read_log(tmp_path)

    def test_log_exceptions_reraises(self, tmp_path):
        setup_logging(file_config(tmp_path))

        @log_exceptions("hr")
        def explode():
            raise ValueError("bad employee row")

        with pytest.raises(ValueError, match="bad employee row"):
            explode()

        content = read_log(tmp_path)
        assert "Exception in explode" in content
        assert "bad employee row" in content
