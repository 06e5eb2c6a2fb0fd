"""Payment notification derivation, urgency and lifecycle."""

from funding_engine.notifications.builder import (
    bank_notification,
    build_notifications,
    fetch_notifications,
    filter_notifications,
    milestone_notification,
    visible_notifications,
)
from funding_engine.notifications.lifecycle import NotificationLifecycleManager, parse_amount
from funding_engine.notifications.schedule import (
    calculate_rate_amount,
    generate_repayment_schedule,
    regenerate_schedule,
)
from funding_engine.notifications.urgency import classify_urgency, compute_stats

__all__ = [
    "NotificationLifecycleManager",
    "bank_notification",
    "build_notifications",
    "calculate_rate_amount",
    "classify_urgency",
    "compute_stats",
    "fetch_notifications",
    "filter_notifications",
    "generate_repayment_schedule",
    "milestone_notification",
    "parse_amount",
    "regenerate_schedule",
    "visible_notifications",
]
