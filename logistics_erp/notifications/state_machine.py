"""
Status lifecycle and structural validation for notification log entries.

An entry is created ``pending`` and only ever moves forward:

    pending -> sent -> delivered | failed | bounced
    pending -> failed

``delivered``, ``failed`` and ``bounced`` are terminal.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Tuple, Union, Mapping

from logistics_erp.notifications.models import (
    NotificationChannel, NotificationStatus, NotificationLogInsert,
    NotificationLogEntry, LogValidationResult, parse_status
)


logger = logging.getLogger(__name__)


VALID_STATUS_TRANSITIONS: Dict[NotificationStatus, Tuple[NotificationStatus, ...]] = {
    NotificationStatus.PENDING: (NotificationStatus.SENT, NotificationStatus.FAILED),
    NotificationStatus.SENT: (
        NotificationStatus.DELIVERED,
        NotificationStatus.FAILED,
        NotificationStatus.BOUNCED,
    ),
    NotificationStatus.DELIVERED: (),
    NotificationStatus.FAILED: (),
    NotificationStatus.BOUNCED: (),
}

TERMINAL_STATUSES = frozenset(
    status for status, next_statuses in VALID_STATUS_TRANSITIONS.items() if not next_statuses
)

_CHANNEL_VALUES = tuple(channel.value for channel in NotificationChannel)
_STATUS_VALUES = tuple(status.value for status in NotificationStatus)

StatusLike = Union[NotificationStatus, str]
LogEntryLike = Union[NotificationLogInsert, NotificationLogEntry, Mapping[str, Any]]


def get_valid_next_statuses(current_status: StatusLike) -> List[NotificationStatus]:
    """
    Get the statuses an entry may move to from ``current_status``.

    Raises:
        InvalidStatusError: If ``current_status`` is not a known status
    """
    return list(VALID_STATUS_TRANSITIONS[parse_status(current_status)])


def is_valid_status_transition(current_status: StatusLike, new_status: StatusLike) -> bool:
    """
    Check whether moving from ``current_status`` to ``new_status`` is legal.

    Raises:
        InvalidStatusError: If either value is not a known status
    """
    return parse_status(new_status) in get_valid_next_statuses(current_status)


def is_terminal_status(status: StatusLike) -> bool:
    """Check if no further transition is permitted from ``status``."""
    return parse_status(status) in TERMINAL_STATUSES


def get_status_label(status: StatusLike) -> str:
    """Human-readable label for a status."""
    return parse_status(status).label


def get_status_color(status: StatusLike) -> str:
    """Badge color for a status."""
    return parse_status(status).color


def _field(entry: LogEntryLike, name: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


def is_log_entry_complete(entry: LogEntryLike) -> bool:
    """
    Check if an entry carries enough information to be dispatched.

    Complete means a non-empty body and at least one recipient identifier.
    Channel and status play no part.
    """
    if not _field(entry, 'body'):
        return False

    return any(
        _field(entry, name) is not None
        for name in ('recipient_user_id', 'recipient_email', 'recipient_phone')
    )


def validate_log_entry(entry: LogEntryLike) -> LogValidationResult:
    """
    Validate a log entry before it is inserted.

    Args:
        entry: Candidate entry, as a model or a raw row mapping

    Returns:
        LogValidationResult with ``error`` set when invalid
    """
    channel = _field(entry, 'channel')
    if not channel:
        return LogValidationResult(valid=False, error='Channel is required')

    if channel not in _CHANNEL_VALUES:
        return LogValidationResult(valid=False, error=f'Invalid channel: {channel}')

    status = _field(entry, 'status')
    if status:
        if status not in _STATUS_VALUES:
            return LogValidationResult(valid=False, error=f'Invalid status: {status}')

        if status == NotificationStatus.FAILED and not _field(entry, 'error_message'):
            return LogValidationResult(
                valid=False, error='Error message is required for failed status'
            )

    return LogValidationResult(valid=True)


def build_pending_log_entry(
    template_id: Optional[str],
    recipient_user_id: Optional[str],
    channel: NotificationChannel,
    subject: Optional[str],
    body: str,
    recipient_email: Optional[str] = None,
    recipient_phone: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
) -> NotificationLogInsert:
    """Construct a new log entry in ``pending`` status."""
    return NotificationLogInsert(
        template_id=template_id,
        recipient_user_id=recipient_user_id,
        recipient_email=recipient_email or None,
        recipient_phone=recipient_phone or None,
        channel=channel,
        subject=subject,
        body=body,
        status=NotificationStatus.PENDING,
        entity_type=entity_type or None,
        entity_id=entity_id or None,
    )


@dataclass
class StatusUpdateResult:
    """Outcome of applying a status change to an entry."""
    entry: Optional[NotificationLogEntry] = None
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.error is None


def apply_status_update(
    entry: NotificationLogEntry,
    new_status: StatusLike,
    error_message: Optional[str] = None,
    external_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> StatusUpdateResult:
    """
    Move an entry to ``new_status``, returning the updated copy.

    ``sent_at`` is stamped on the move to ``sent`` and ``delivered_at`` on the
    move to ``delivered`` unless already set. The input entry is not modified.

    Args:
        entry: Current snapshot of the entry
        new_status: Status reported for the entry
        error_message: Failure reason, required when moving to ``failed``
        external_id: Provider message id, kept when given
        now: Timestamp to stamp with (defaults to the current UTC time)

    Returns:
        StatusUpdateResult holding either the new entry or an error
    """
    target = parse_status(new_status)

    if not is_valid_status_transition(entry.status, target):
        logger.debug(
            f"Rejected status transition for log entry {entry.id}: "
            f"{entry.status.value} -> {target.value}"
        )
        return StatusUpdateResult(
            error=f'Invalid status transition from {entry.status.value} to {target.value}'
        )

    failure_reason = error_message or entry.error_message
    if target == NotificationStatus.FAILED and not failure_reason:
        return StatusUpdateResult(error='Error message is required for failed status')

    timestamp = now or datetime.now(timezone.utc)
    changes: Dict[str, Any] = {'status': target, 'error_message': failure_reason}

    if external_id:
        changes['external_id'] = external_id
    if target == NotificationStatus.SENT and entry.sent_at is None:
        changes['sent_at'] = timestamp
    if target == NotificationStatus.DELIVERED and entry.delivered_at is None:
        changes['delivered_at'] = timestamp

    return StatusUpdateResult(entry=replace(entry, **changes))
