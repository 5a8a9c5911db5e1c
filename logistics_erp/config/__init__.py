"""
Configuration module for the logistics ERP core.
"""

from .settings import (
    Settings,
    Environment,
    LogLevel,
    NotificationConfig,
    LoggingConfig,
    load_settings,
    get_settings,
    reload_settings
)

__all__ = [
    'Settings',
    'Environment',
    'LogLevel',
    'NotificationConfig',
    'LoggingConfig',
    'load_settings',
    'get_settings',
    'reload_settings'
]
