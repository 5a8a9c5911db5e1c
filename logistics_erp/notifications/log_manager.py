"""
Notification log manager.

Coordinates creation, status updates and queries of notification log entries
on top of a pluggable store. Validation and transition rules come from
``state_machine``; statistics from ``stats``.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, List, Dict, Tuple, Callable, Iterable, Any

from logistics_erp.config.settings import NotificationConfig
from logistics_erp.notifications.models import (
    NotificationChannel, NotificationStatus, NotificationLogInsert,
    NotificationLogEntry, NotificationStats, DeliveryHealth,
    parse_channel, parse_status
)
from logistics_erp.notifications.state_machine import validate_log_entry, apply_status_update
from logistics_erp.notifications.stats import (
    calculate_stats, calculate_daily_stats, filter_log_entries, get_delivery_health,
    merge_stats
)


logger = logging.getLogger(__name__)


class NotificationLogStore(ABC):
    """Storage backend for notification log entries."""

    @abstractmethod
    def add(self, entry: NotificationLogEntry) -> None:
        """Persist a new entry."""
        pass

    @abstractmethod
    def get(self, entry_id: str) -> Optional[NotificationLogEntry]:
        """Fetch an entry by id, or None if it does not exist."""
        pass

    @abstractmethod
    def update(self, entry: NotificationLogEntry) -> None:
        """Replace the stored entry having the same id."""
        pass

    @abstractmethod
    def all(self) -> List[NotificationLogEntry]:
        """Every stored entry."""
        pass


class InMemoryNotificationLogStore(NotificationLogStore):
    """Dictionary-backed store, used in tests and for offline processing."""

    def __init__(self, entries: Optional[List[NotificationLogEntry]] = None):
        self._entries: Dict[str, NotificationLogEntry] = {}
        for entry in entries or []:
            self.add(entry)

    def add(self, entry: NotificationLogEntry) -> None:
        self._entries[entry.id] = entry

    def get(self, entry_id: str) -> Optional[NotificationLogEntry]:
        return self._entries.get(entry_id)

    def update(self, entry: NotificationLogEntry) -> None:
        if entry.id not in self._entries:
            raise KeyError(entry.id)
        self._entries[entry.id] = entry

    def all(self) -> List[NotificationLogEntry]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class LogOperationResult:
    """Result of a log manager operation."""
    data: Optional[NotificationLogEntry] = None
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.error is None


def _newest_first(entries: List[NotificationLogEntry]) -> List[NotificationLogEntry]:
    return sorted(
        entries,
        key=lambda entry: entry.created_at.timestamp() if entry.created_at else float('-inf'),
        reverse=True
    )


class NotificationLogManager:
    """
    Records notification deliveries and tracks them through their status
    lifecycle.
    """

    def __init__(self,
                 store: Optional[NotificationLogStore] = None,
                 config: Optional[NotificationConfig] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize notification log manager.

        Args:
            store: Storage backend (defaults to an in-memory store)
            config: Notification configuration settings
            clock: Source of the current time, used for timestamps
        """
        self.store = store if store is not None else InMemoryNotificationLogStore()
        self.config = config or NotificationConfig()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        logger.debug("Notification log manager initialized")

    def create_log_entry(self, entry: NotificationLogInsert) -> LogOperationResult:
        """
        Validate and store a new log entry.

        Args:
            entry: Entry to create, usually from build_pending_log_entry

        Returns:
            LogOperationResult with the stored entry or a validation error
        """
        validation = validate_log_entry(entry)
        if not validation.valid:
            logger.warning(f"Rejected notification log entry: {validation.error}")
            return LogOperationResult(error=validation.error)

        now = self._clock()
        status = parse_status(entry.status or NotificationStatus.PENDING)
        stored = NotificationLogEntry(
            id=str(uuid.uuid4()),
            channel=parse_channel(entry.channel),
            status=status,
            body=entry.body,
            template_id=entry.template_id,
            recipient_user_id=entry.recipient_user_id,
            recipient_email=entry.recipient_email,
            recipient_phone=entry.recipient_phone,
            subject=entry.subject,
            error_message=entry.error_message,
            external_id=entry.external_id,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            sent_at=now if status == NotificationStatus.SENT else None,
            delivered_at=now if status == NotificationStatus.DELIVERED else None,
            created_at=now,
        )

        self.store.add(stored)
        logger.info(
            f"Created {stored.channel.value} notification log entry",
            extra={"log_entry_id": stored.id}
        )

        return LogOperationResult(data=stored)

    def get_log_entry(self, entry_id: str) -> LogOperationResult:
        """Fetch an entry; a missing entry is not an error."""
        return LogOperationResult(data=self.store.get(entry_id))

    def update_log_status(self,
                          entry_id: str,
                          new_status: NotificationStatus,
                          error_message: Optional[str] = None,
                          external_id: Optional[str] = None) -> LogOperationResult:
        """
        Move an entry to a new status if the transition is legal.

        Args:
            entry_id: Entry to update
            new_status: Status reported by the delivery provider
            error_message: Failure reason for failed deliveries
            external_id: Provider message id

        Returns:
            LogOperationResult with the updated entry or the reason for rejection
        """
        current = self.store.get(entry_id)
        if current is None:
            return LogOperationResult(error='Log entry not found')

        result = apply_status_update(
            current,
            new_status,
            error_message=error_message,
            external_id=external_id,
            now=self._clock(),
        )

        if not result.is_success:
            logger.warning(
                f"Status update rejected: {result.error}",
                extra={"log_entry_id": entry_id}
            )
            return LogOperationResult(error=result.error)

        self.store.update(result.entry)
        logger.info(
            f"Notification log entry moved {current.status.value} -> {result.entry.status.value}",
            extra={"log_entry_id": entry_id}
        )

        return LogOperationResult(data=result.entry)

    def mark_sent(self, entry_id: str, external_id: Optional[str] = None) -> LogOperationResult:
        return self.update_log_status(entry_id, NotificationStatus.SENT, external_id=external_id)

    def mark_delivered(self, entry_id: str, external_id: Optional[str] = None) -> LogOperationResult:
        return self.update_log_status(entry_id, NotificationStatus.DELIVERED, external_id=external_id)

    def mark_failed(self, entry_id: str, error_message: str) -> LogOperationResult:
        return self.update_log_status(entry_id, NotificationStatus.FAILED, error_message=error_message)

    def get_logs_by_entity(self, entity_type: str, entity_id: str) -> List[NotificationLogEntry]:
        """All entries attached to a business record, newest first."""
        return _newest_first([
            entry for entry in self.store.all()
            if entry.entity_type == entity_type and entry.entity_id == entity_id
        ])

    def get_logs_by_recipient(self,
                              user_id: str,
                              limit: Optional[int] = None,
                              status: Optional[NotificationStatus] = None,
                              channel: Optional[NotificationChannel] = None) -> List[NotificationLogEntry]:
        """Entries addressed to a user, newest first."""
        entries = filter_log_entries(self.store.all(), channel=channel, status=status)
        entries = _newest_first([e for e in entries if e.recipient_user_id == user_id])
        return entries[:limit] if limit else entries

    def get_logs_by_status(self,
                           status: NotificationStatus,
                           limit: Optional[int] = None,
                           channel: Optional[NotificationChannel] = None,
                           start: Optional[datetime] = None,
                           end: Optional[datetime] = None) -> List[NotificationLogEntry]:
        """Entries currently in ``status``, newest first."""
        entries = _newest_first(filter_log_entries(
            self.store.all(), channel=channel, status=status, start=start, end=end
        ))
        return entries[:limit] if limit else entries

    def get_recent_logs(self,
                        limit: Optional[int] = None,
                        offset: int = 0,
                        channel: Optional[NotificationChannel] = None,
                        status: Optional[NotificationStatus] = None) -> Tuple[List[NotificationLogEntry], int]:
        """
        One page of entries, newest first.

        ``limit`` defaults to the configured page size; 0 returns every
        entry from ``offset`` on, as the other queries do.

        Returns:
            Tuple of (page of entries, total number of matching entries)
        """
        if limit is None:
            limit = self.config.recent_logs_page_size
        entries = _newest_first(filter_log_entries(self.store.all(), channel=channel, status=status))
        page = entries[offset:offset + limit] if limit else entries[offset:]
        return page, len(entries)

    def get_stats(self,
                  channel: Optional[NotificationChannel] = None,
                  start: Optional[datetime] = None,
                  end: Optional[datetime] = None) -> NotificationStats:
        """Statistics over the stored entries matching the filters."""
        entries = filter_log_entries(self.store.all(), channel=channel, start=start, end=end)
        return calculate_stats(entries, errors_limit=self.config.common_errors_limit)

    def merge_stats(self, stats_list: Iterable[NotificationStats]) -> NotificationStats:
        """Combine statistics, ranking errors with the configured limit."""
        return merge_stats(stats_list, errors_limit=self.config.common_errors_limit)

    def get_stats_by_channel(self,
                             start: Optional[datetime] = None,
                             end: Optional[datetime] = None) -> Dict[NotificationChannel, NotificationStats]:
        return {
            channel: self.get_stats(channel=channel, start=start, end=end)
            for channel in NotificationChannel
        }

    def get_daily_stats(self, start: datetime, end: datetime) -> List[Tuple[Any, NotificationStats]]:
        """Per-day statistics for entries created between ``start`` and ``end``."""
        return calculate_daily_stats(filter_log_entries(self.store.all(), start=start, end=end))

    def get_delivery_health(self, channel: Optional[NotificationChannel] = None) -> DeliveryHealth:
        """Delivery health using the configured thresholds."""
        return get_delivery_health(self.get_stats(channel=channel), self.config.health_thresholds)
