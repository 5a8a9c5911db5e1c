"""
Data models for the notification log.
"""

from enum import Enum
from typing import Optional, Dict, Any, List, Union
from dataclasses import dataclass, field
from datetime import datetime

from logistics_erp.notifications.exceptions import InvalidChannelError, InvalidStatusError


class NotificationChannel(str, Enum):
    """Supported notification channels."""
    EMAIL = "email"
    WHATSAPP = "whatsapp"
    IN_APP = "in_app"
    PUSH = "push"


class NotificationStatus(str, Enum):
    """Status of a notification log entry."""
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"
    BOUNCED = "bounced"

    @property
    def label(self) -> str:
        """Human-readable status label."""
        return self.value.capitalize()

    @property
    def color(self) -> str:
        """Badge color used by status displays."""
        return _STATUS_COLORS[self]


_STATUS_COLORS = {
    NotificationStatus.PENDING: "yellow",
    NotificationStatus.SENT: "blue",
    NotificationStatus.DELIVERED: "green",
    NotificationStatus.FAILED: "red",
    NotificationStatus.BOUNCED: "orange",
}


class DeliveryHealth(str, Enum):
    """Coarse classification of aggregate delivery performance."""
    UNKNOWN = "unknown"
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


def parse_channel(value: Union[NotificationChannel, str]) -> NotificationChannel:
    """Convert a raw channel value to a NotificationChannel."""
    if isinstance(value, NotificationChannel):
        return value
    try:
        return NotificationChannel(value)
    except ValueError:
        raise InvalidChannelError(value)


def parse_status(value: Union[NotificationStatus, str]) -> NotificationStatus:
    """Convert a raw status value to a NotificationStatus."""
    if isinstance(value, NotificationStatus):
        return value
    try:
        return NotificationStatus(value)
    except ValueError:
        raise InvalidStatusError(value)


def _parse_timestamp(value: Optional[Union[datetime, str]]) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    # Storage rows use ISO-8601 with a trailing Z
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class NotificationLogInsert:
    """A notification log row that has not been persisted yet."""
    channel: Optional[NotificationChannel]
    body: Optional[str]
    template_id: Optional[str] = None
    recipient_user_id: Optional[str] = None
    recipient_email: Optional[str] = None
    recipient_phone: Optional[str] = None
    subject: Optional[str] = None
    status: NotificationStatus = NotificationStatus.PENDING
    error_message: Optional[str] = None
    external_id: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a storage row."""
        return {
            'template_id': self.template_id,
            'recipient_user_id': self.recipient_user_id,
            'recipient_email': self.recipient_email,
            'recipient_phone': self.recipient_phone,
            'channel': self.channel.value if isinstance(self.channel, Enum) else self.channel,
            'subject': self.subject,
            'body': self.body,
            'status': self.status.value if isinstance(self.status, Enum) else self.status,
            'error_message': self.error_message,
            'external_id': self.external_id,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
        }


@dataclass
class NotificationLogEntry:
    """A persisted notification log row."""
    id: str
    channel: NotificationChannel
    status: NotificationStatus
    body: Optional[str] = None
    template_id: Optional[str] = None
    recipient_user_id: Optional[str] = None
    recipient_email: Optional[str] = None
    recipient_phone: Optional[str] = None
    subject: Optional[str] = None
    error_message: Optional[str] = None
    external_id: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    sent_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NotificationLogEntry':
        """
        Create an entry from a storage row.

        Raises:
            InvalidChannelError: If the row's channel is not a known channel
            InvalidStatusError: If the row's status is not a known status
        """
        return cls(
            id=str(data['id']),
            channel=parse_channel(data['channel']),
            status=parse_status(data['status']),
            body=data.get('body'),
            template_id=data.get('template_id'),
            recipient_user_id=data.get('recipient_user_id'),
            recipient_email=data.get('recipient_email'),
            recipient_phone=data.get('recipient_phone'),
            subject=data.get('subject'),
            error_message=data.get('error_message'),
            external_id=data.get('external_id'),
            entity_type=data.get('entity_type'),
            entity_id=data.get('entity_id'),
            sent_at=_parse_timestamp(data.get('sent_at')),
            delivered_at=_parse_timestamp(data.get('delivered_at')),
            created_at=_parse_timestamp(data.get('created_at')),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a storage row."""
        return {
            'id': self.id,
            'template_id': self.template_id,
            'recipient_user_id': self.recipient_user_id,
            'recipient_email': self.recipient_email,
            'recipient_phone': self.recipient_phone,
            'channel': self.channel.value,
            'subject': self.subject,
            'body': self.body,
            'status': self.status.value,
            'error_message': self.error_message,
            'external_id': self.external_id,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'sent_at': _format_timestamp(self.sent_at),
            'delivered_at': _format_timestamp(self.delivered_at),
            'created_at': _format_timestamp(self.created_at),
        }


@dataclass
class LogValidationResult:
    """Outcome of structural validation of a log entry."""
    valid: bool
    error: Optional[str] = None


@dataclass
class ErrorCount:
    """Number of log entries sharing one error message."""
    error: str
    count: int


@dataclass
class NotificationStats:
    """
    Aggregate view of a set of notification log entries.

    Always recomputed from the log; never stored as authoritative state.
    ``total_sent`` counts every entry regardless of status.
    """
    total_sent: int
    by_channel: Dict[NotificationChannel, int]
    by_status: Dict[NotificationStatus, int]
    success_rate: float
    failure_rate: float
    common_errors: List[ErrorCount] = field(default_factory=list)

    @property
    def completed_count(self) -> int:
        """Entries that have left the pending status."""
        return self.total_sent - self.by_status[NotificationStatus.PENDING]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'total_sent': self.total_sent,
            'by_channel': {channel.value: count for channel, count in self.by_channel.items()},
            'by_status': {status.value: count for status, count in self.by_status.items()},
            'success_rate': self.success_rate,
            'failure_rate': self.failure_rate,
            'common_errors': [
                {'error': item.error, 'count': item.count} for item in self.common_errors
            ],
        }
