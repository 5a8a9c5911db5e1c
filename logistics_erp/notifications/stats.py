"""
Notification delivery statistics.

Folds notification log entries into counts, rates and a delivery health
classification. Everything here is a pure function of its inputs.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional, Dict, List, Tuple, Iterable, Sequence

from logistics_erp.notifications.models import (
    NotificationChannel, NotificationStatus, NotificationLogEntry,
    NotificationStats, ErrorCount, DeliveryHealth, parse_channel, parse_status
)


logger = logging.getLogger(__name__)


COMMON_ERRORS_LIMIT = 10


@dataclass(frozen=True)
class HealthThresholds:
    """Rate thresholds (percent) for delivery health classification."""
    min_completed: int = 10
    healthy_min_success_rate: float = 90.0
    healthy_max_failure_rate: float = 5.0
    critical_max_success_rate: float = 60.0
    critical_min_failure_rate: float = 30.0


DEFAULT_HEALTH_THRESHOLDS = HealthThresholds()


def _percentage(count: int, total: int) -> float:
    if total == 0:
        return 0
    return round(count / total * 100, 2)


def _rank_errors(error_counts: Counter, limit: int) -> List[ErrorCount]:
    # equal counts fall back to message order so ranking ignores input order
    ranked = sorted(error_counts.items(), key=lambda item: (-item[1], item[0]))
    return [
        ErrorCount(error=error, count=count)
        for error, count in ranked[:limit]
        if count > 0
    ]


def _build_stats(by_channel: Dict[NotificationChannel, int],
                 by_status: Dict[NotificationStatus, int],
                 total: int,
                 error_counts: Counter,
                 errors_limit: int) -> NotificationStats:
    delivered = by_status[NotificationStatus.DELIVERED]
    failed = by_status[NotificationStatus.FAILED] + by_status[NotificationStatus.BOUNCED]

    return NotificationStats(
        total_sent=total,
        by_channel=by_channel,
        by_status=by_status,
        success_rate=_percentage(delivered, total),
        failure_rate=_percentage(failed, total),
        common_errors=_rank_errors(error_counts, errors_limit),
    )


def create_empty_stats() -> NotificationStats:
    """Statistics for an empty log."""
    return NotificationStats(
        total_sent=0,
        by_channel={channel: 0 for channel in NotificationChannel},
        by_status={status: 0 for status in NotificationStatus},
        success_rate=0,
        failure_rate=0,
        common_errors=[],
    )


def calculate_stats(entries: Sequence[NotificationLogEntry],
                    errors_limit: int = COMMON_ERRORS_LIMIT) -> NotificationStats:
    """
    Calculate notification statistics from log entries.

    ``success_rate`` is the delivered share of all entries and
    ``failure_rate`` the failed-or-bounced share; in-flight ``sent`` entries
    count towards neither.

    Args:
        entries: Log entries to aggregate
        errors_limit: Maximum number of distinct error messages to report

    Returns:
        NotificationStats for the entries
    """
    by_channel = {channel: 0 for channel in NotificationChannel}
    by_status = {status: 0 for status in NotificationStatus}
    error_counts: Counter = Counter()

    for entry in entries:
        by_channel[parse_channel(entry.channel)] += 1
        by_status[parse_status(entry.status)] += 1

        if entry.error_message:
            error_counts[entry.error_message] += 1

    stats = _build_stats(by_channel, by_status, len(entries), error_counts, errors_limit)

    logger.debug(
        f"Calculated stats for {stats.total_sent} log entries: "
        f"success {stats.success_rate}%, failure {stats.failure_rate}%"
    )

    return stats


def merge_stats(stats_list: Iterable[NotificationStats],
                errors_limit: Optional[int] = None) -> NotificationStats:
    """
    Combine several statistics objects into one.

    Counts are summed; rates are recomputed from the summed counts and error
    counts are merged by message before ranking again. The result does not
    depend on the order of ``stats_list``.

    Args:
        stats_list: Statistics to combine
        errors_limit: Maximum number of distinct error messages to report.
            Defaults to COMMON_ERRORS_LIMIT, raised to the longest error list
            among the inputs so that merging a single object returns it
            unchanged.
    """
    stats_list = list(stats_list)
    if errors_limit is None:
        errors_limit = max(
            [COMMON_ERRORS_LIMIT] + [len(stats.common_errors) for stats in stats_list]
        )

    by_channel = {channel: 0 for channel in NotificationChannel}
    by_status = {status: 0 for status in NotificationStatus}
    error_counts: Counter = Counter()
    total = 0

    for stats in stats_list:
        total += stats.total_sent
        for channel in NotificationChannel:
            by_channel[channel] += stats.by_channel.get(channel, 0)
        for status in NotificationStatus:
            by_status[status] += stats.by_status.get(status, 0)
        for item in stats.common_errors:
            error_counts[item.error] += item.count

    return _build_stats(by_channel, by_status, total, error_counts, errors_limit)


def get_channel_percentage(stats: NotificationStats, channel: NotificationChannel) -> float:
    """Share of all entries sent through ``channel``, in percent."""
    return _percentage(stats.by_channel[parse_channel(channel)], stats.total_sent)


def get_status_percentage(stats: NotificationStats, status: NotificationStatus) -> float:
    """Share of all entries currently in ``status``, in percent."""
    return _percentage(stats.by_status[parse_status(status)], stats.total_sent)


def get_most_used_channel(stats: NotificationStats) -> Optional[NotificationChannel]:
    """
    Channel with the highest count.

    Ties go to the channel declared first in NotificationChannel.
    Returns None for empty statistics.
    """
    if stats.total_sent == 0:
        return None

    most_used = None
    max_count = 0
    for channel in NotificationChannel:
        count = stats.by_channel.get(channel, 0)
        if count > max_count:
            most_used = channel
            max_count = count

    return most_used


def get_delivery_health(stats: NotificationStats,
                        thresholds: HealthThresholds = DEFAULT_HEALTH_THRESHOLDS) -> DeliveryHealth:
    """
    Classify delivery performance.

    Returns UNKNOWN until ``thresholds.min_completed`` entries have left the
    pending status.
    """
    if stats.completed_count < thresholds.min_completed:
        return DeliveryHealth.UNKNOWN

    if (stats.success_rate >= thresholds.healthy_min_success_rate and
            stats.failure_rate <= thresholds.healthy_max_failure_rate):
        return DeliveryHealth.HEALTHY

    if (stats.success_rate <= thresholds.critical_max_success_rate or
            stats.failure_rate >= thresholds.critical_min_failure_rate):
        return DeliveryHealth.CRITICAL

    return DeliveryHealth.WARNING


def is_healthy_delivery(stats: NotificationStats,
                        thresholds: HealthThresholds = DEFAULT_HEALTH_THRESHOLDS) -> bool:
    """Check if delivery health is HEALTHY."""
    return get_delivery_health(stats, thresholds) == DeliveryHealth.HEALTHY


def _as_date(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # naive timestamps are taken to be UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def filter_log_entries(entries: Iterable[NotificationLogEntry],
                       channel: Optional[NotificationChannel] = None,
                       status: Optional[NotificationStatus] = None,
                       start: Optional[datetime] = None,
                       end: Optional[datetime] = None) -> List[NotificationLogEntry]:
    """
    Select entries matching all given criteria.

    ``start`` and ``end`` are inclusive bounds on ``created_at``; entries
    without ``created_at`` never match a date bound. Naive bounds and
    timestamps are compared as UTC.
    """
    start = _as_utc(start)
    end = _as_utc(end)

    selected = []
    for entry in entries:
        if channel is not None and entry.channel != channel:
            continue
        if status is not None and entry.status != status:
            continue
        created_at = _as_utc(entry.created_at)
        if start is not None and (created_at is None or created_at < start):
            continue
        if end is not None and (created_at is None or created_at > end):
            continue
        selected.append(entry)
    return selected


def calculate_stats_by_channel(
    entries: Sequence[NotificationLogEntry],
) -> Dict[NotificationChannel, NotificationStats]:
    """Separate statistics for each channel."""
    return {
        channel: calculate_stats(filter_log_entries(entries, channel=channel))
        for channel in NotificationChannel
    }


def calculate_daily_stats(
    entries: Iterable[NotificationLogEntry],
) -> List[Tuple[date, NotificationStats]]:
    """
    Statistics per calendar day of ``created_at``, oldest day first.

    Entries without ``created_at`` are skipped.
    """
    entries_by_date: Dict[date, List[NotificationLogEntry]] = {}

    for entry in entries:
        if entry.created_at is None:
            continue
        entries_by_date.setdefault(_as_date(entry.created_at), []).append(entry)

    return [
        (day, calculate_stats(day_entries))
        for day, day_entries in sorted(entries_by_date.items())
    ]
