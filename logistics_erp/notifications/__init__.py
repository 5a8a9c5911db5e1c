"""
Notification log subsystem for the logistics ERP core.

Tracks outbound notifications (email, WhatsApp, in-app, push) through their
delivery status lifecycle and aggregates them into delivery statistics.
"""

from logistics_erp.notifications.models import (
    NotificationChannel, NotificationStatus, DeliveryHealth,
    NotificationLogInsert, NotificationLogEntry, NotificationStats,
    ErrorCount, LogValidationResult, parse_channel, parse_status
)
from logistics_erp.notifications.state_machine import (
    VALID_STATUS_TRANSITIONS, TERMINAL_STATUSES, StatusUpdateResult,
    is_valid_status_transition, get_valid_next_statuses, is_terminal_status,
    is_log_entry_complete, validate_log_entry, build_pending_log_entry,
    apply_status_update, get_status_label, get_status_color
)
from logistics_erp.notifications.stats import (
    HealthThresholds, DEFAULT_HEALTH_THRESHOLDS, calculate_stats,
    create_empty_stats, merge_stats, get_channel_percentage,
    get_status_percentage, get_most_used_channel, get_delivery_health,
    is_healthy_delivery, filter_log_entries, calculate_stats_by_channel,
    calculate_daily_stats
)
from logistics_erp.notifications.log_manager import (
    NotificationLogManager, NotificationLogStore,
    InMemoryNotificationLogStore, LogOperationResult
)
from logistics_erp.notifications.exceptions import (
    NotificationError, InvalidChannelError, InvalidStatusError
)

__all__ = [
    'NotificationChannel',
    'NotificationStatus',
    'DeliveryHealth',
    'NotificationLogInsert',
    'NotificationLogEntry',
    'NotificationStats',
    'ErrorCount',
    'LogValidationResult',
    'parse_channel',
    'parse_status',
    'VALID_STATUS_TRANSITIONS',
    'TERMINAL_STATUSES',
    'StatusUpdateResult',
    'is_valid_status_transition',
    'get_valid_next_statuses',
    'is_terminal_status',
    'is_log_entry_complete',
    'validate_log_entry',
    'build_pending_log_entry',
    'apply_status_update',
    'get_status_label',
    'get_status_color',
    'HealthThresholds',
    'DEFAULT_HEALTH_THRESHOLDS',
    'calculate_stats',
    'create_empty_stats',
    'merge_stats',
    'get_channel_percentage',
    'get_status_percentage',
    'get_most_used_channel',
    'get_delivery_health',
    'is_healthy_delivery',
    'filter_log_entries',
    'calculate_stats_by_channel',
    'calculate_daily_stats',
    'NotificationLogManager',
    'NotificationLogStore',
    'InMemoryNotificationLogStore',
    'LogOperationResult',
    'NotificationError',
    'InvalidChannelError',
    'InvalidStatusError'
]
