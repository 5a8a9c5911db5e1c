"""
Configuration management for the logistics ERP core.

Handles environment variables, .env files and validation of the tunable
thresholds used by the notification statistics.
"""

import os
import sys
from pathlib import Path
from typing import Optional, Dict, Any, TYPE_CHECKING
from enum import Enum

try:
    from dotenv import load_dotenv
    from pydantic import Field, field_validator, model_validator
    from pydantic_settings import BaseSettings
except ImportError as e:
    print(f"Missing required dependency: {e}")
    print("Please install: pip install python-dotenv pydantic-settings")
    sys.exit(1)

if TYPE_CHECKING:
    from logistics_erp.notifications.stats import HealthThresholds


class Environment(str, Enum):
    """Deployment environment types."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class NotificationConfig(BaseSettings):
    """Notification log and statistics configuration."""

    common_errors_limit: int = Field(10, description="Maximum distinct errors reported in statistics")
    recent_logs_page_size: int = Field(50, description="Default page size for recent log queries")

    # Delivery health thresholds (percent)
    min_completed_for_health: int = Field(10, description="Completed entries needed before health is classified")
    healthy_min_success_rate: float = Field(90.0, description="Minimum success rate for healthy delivery")
    healthy_max_failure_rate: float = Field(5.0, description="Maximum failure rate for healthy delivery")
    critical_max_success_rate: float = Field(60.0, description="Success rate at or below which delivery is critical")
    critical_min_failure_rate: float = Field(30.0, description="Failure rate at or above which delivery is critical")

    @field_validator('common_errors_limit', 'recent_logs_page_size', 'min_completed_for_health')
    def must_be_positive(cls, v):
        if v <= 0:
            raise ValueError('Value must be positive')
        return v

    @field_validator('healthy_min_success_rate', 'healthy_max_failure_rate',
                     'critical_max_success_rate', 'critical_min_failure_rate')
    def rate_must_be_percentage(cls, v):
        if not 0.0 <= v <= 100.0:
            raise ValueError('Rate thresholds must be between 0 and 100')
        return v

    @model_validator(mode='after')
    def validate_health_bands(self):
        """Ensure the critical band sits below the healthy band."""
        if self.critical_max_success_rate >= self.healthy_min_success_rate:
            raise ValueError('critical_max_success_rate must be below healthy_min_success_rate')
        if self.critical_min_failure_rate <= self.healthy_max_failure_rate:
            raise ValueError('critical_min_failure_rate must be above healthy_max_failure_rate')
        return self

    @property
    def health_thresholds(self) -> "HealthThresholds":
        """Thresholds in the form the statistics functions take."""
        from logistics_erp.notifications.stats import HealthThresholds

        return HealthThresholds(
            min_completed=self.min_completed_for_health,
            healthy_min_success_rate=self.healthy_min_success_rate,
            healthy_max_failure_rate=self.healthy_max_failure_rate,
            critical_max_success_rate=self.critical_max_success_rate,
            critical_min_failure_rate=self.critical_min_failure_rate,
        )

    model_config = {"env_prefix": "NOTIFICATION_"}


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Default log level")
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )

    # File logging
    enable_file_logging: bool = Field(False, description="Enable file logging")
    log_file: str = Field("logs/logistics_erp.log", description="Log file path")
    max_bytes: int = Field(10 * 1024 * 1024, description="Maximum log file size in bytes")
    backup_count: int = Field(5, description="Number of backup log files")

    # Console logging
    enable_console_logging: bool = Field(True, description="Enable console logging")
    console_level: LogLevel = Field(LogLevel.INFO, description="Console log level")

    # Structured logging
    enable_json_logging: bool = Field(False, description="Enable JSON structured logging")

    @field_validator('level', 'console_level', mode='before')
    def normalize_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    def to_logger_config(self) -> Dict[str, Any]:
        """Configuration dictionary accepted by LoggerSetup."""
        return {
            'level': self.level.value,
            'format': self.format,
            'enable_file_logging': self.enable_file_logging,
            'log_file': self.log_file,
            'max_bytes': self.max_bytes,
            'backup_count': self.backup_count,
            'enable_console_logging': self.enable_console_logging,
            'console_level': self.console_level.value,
            'enable_json_logging': self.enable_json_logging,
        }

    model_config = {"env_prefix": "LOG_"}


class Settings(BaseSettings):
    """Main application settings."""

    environment: Environment = Field(Environment.DEVELOPMENT, description="Deployment environment")
    debug: bool = Field(False, description="Enable debug mode")
    app_name: str = Field("Logistics ERP Core", description="Application name")
    app_version: str = Field("1.0.0", description="Application version")

    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator('environment', mode='before')
    def validate_environment(cls, v):
        """Validate and normalize environment."""
        if isinstance(v, str):
            try:
                return Environment(v.lower())
            except ValueError:
                raise ValueError(f'Invalid environment: {v}. Must be one of: {[e.value for e in Environment]}')
        return v

    @model_validator(mode='after')
    def validate_environment_settings(self):
        """Apply environment-specific validation."""
        if self.environment == Environment.PRODUCTION and self.debug:
            raise ValueError('Debug mode cannot be enabled in production')
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def create_directories(self):
        """Create the log directory if file logging is enabled."""
        if self.logging.enable_file_logging:
            log_dir = os.path.dirname(self.logging.log_file)
            if log_dir:
                Path(log_dir).mkdir(parents=True, exist_ok=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary (for debugging)."""
        return self.model_dump(mode='json')

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Load application settings from environment variables and .env file.

    Args:
        env_file: Optional path to .env file

    Returns:
        Configured Settings instance

    Raises:
        ValueError: If configuration is invalid
        FileNotFoundError: If the given env file does not exist
    """
    if env_file:
        if not os.path.exists(env_file):
            raise FileNotFoundError(f"Environment file not found: {env_file}")
        load_dotenv(env_file, override=True)
    else:
        for possible_env_file in [".env", ".env.local", f".env.{os.getenv('ENVIRONMENT', 'development')}"]:
            if os.path.exists(possible_env_file):
                load_dotenv(possible_env_file, override=False)

    settings = Settings()
    settings.create_directories()
    return settings


def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance
    """
    if not hasattr(get_settings, '_cached_settings'):
        get_settings._cached_settings = load_settings()

    return get_settings._cached_settings


def reload_settings() -> Settings:
    """
    Reload settings (clears cache).

    Returns:
        Fresh Settings instance
    """
    if hasattr(get_settings, '_cached_settings'):
        delattr(get_settings, '_cached_settings')

    return get_settings()
