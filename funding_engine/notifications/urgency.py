"""Dashboard statistics for notifications.

``classify_urgency`` lives with the notification models and is re-exported
here next to the counters that share its thresholds.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable

from funding_engine.config import NotificationConfig
from funding_engine.models.enums import NotificationStatus
from funding_engine.models.notification import NotificationStats, PaymentNotification, classify_urgency

__all__ = ["classify_urgency", "compute_stats"]


def compute_stats(
    notifications: Iterable[PaymentNotification],
    today: date,
    config: NotificationConfig | None = None,
) -> NotificationStats:
    """Counters over an already-filtered notification set.

    ``due_this_month`` is a superset of ``due_this_week``.
    """
    config = config or NotificationConfig()
    stats = NotificationStats()

    for notification in notifications:
        amount = Decimal(notification.amount)
        status = notification.status

        if status in (NotificationStatus.PENDING, NotificationStatus.OVERDUE):
            stats.total_amount_due += amount

        if status == NotificationStatus.PENDING:
            stats.total_pending += 1
            days = notification.days_remaining(today)
            if 0 <= days <= config.due_week_days:
                stats.due_this_week += 1
            if 0 <= days <= config.due_month_days:
                stats.due_this_month += 1

        if status == NotificationStatus.OVERDUE:
            stats.total_overdue += 1
            stats.total_overdue_amount += amount

    return stats
