"""Tests for urgency classification and dashboard stats."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from funding_engine.config import NotificationConfig
from funding_engine.models.enums import NotificationStatus, NotificationType, UrgencyLevel
from funding_engine.models.notification import BankNotification
from funding_engine.notifications.urgency import classify_urgency, compute_stats

TODAY = date(2025, 6, 15)


def _notification(
    days: int,
    status: NotificationStatus = NotificationStatus.PENDING,
    amount: str = "1000",
    notification_id: str = "e-1",
) -> BankNotification:
    return BankNotification(
        notification_id=notification_id,
        due_date=TODAY + timedelta(days=days),
        amount=Decimal(amount),
        status=status,
        notification_type=NotificationType.RECURRING,
        project_name="Harbor View",
        bank_credit_id="credit-001",
        bank_id="bank-001",
        bank_name="First Bank",
        credit_type="term_loan",
        payment_number=1,
    )


class TestClassifyUrgency:
    """Tests for classify_urgency."""

    def test_due_today_is_critical(self) -> None:
        urgency = classify_urgency(_notification(0), TODAY)

        assert urgency.level == UrgencyLevel.CRITICAL
        assert urgency.days_remaining == 0
        assert urgency.message == "Due today"

    def test_overdue(self) -> None:
        urgency = classify_urgency(_notification(-3, NotificationStatus.OVERDUE), TODAY)

        assert urgency.level == UrgencyLevel.CRITICAL
        assert urgency.days_remaining == -3
        assert urgency.message == "Overdue by 3 days"

    def test_overdue_singular(self) -> None:
        urgency = classify_urgency(_notification(-1, NotificationStatus.OVERDUE), TODAY)

        assert urgency.message == "Overdue by 1 day"

    def test_overdue_status_checked_before_due_today(self) -> None:
        urgency = classify_urgency(_notification(0, NotificationStatus.OVERDUE), TODAY)

        assert urgency.message == "Overdue by 0 days"

    def test_past_due_without_overdue_status(self) -> None:
        urgency = classify_urgency(_notification(-2), TODAY)

        assert urgency.level == UrgencyLevel.CRITICAL
        assert urgency.message == "Overdue by 2 days"

    @pytest.mark.parametrize(
        "days, level, message",
        [
            (1, UrgencyLevel.HIGH, "Due in 1 day"),
            (7, UrgencyLevel.HIGH, "Due in 7 days"),
            (8, UrgencyLevel.MEDIUM, "Due in 8 days"),
            (30, UrgencyLevel.MEDIUM, "Due in 30 days"),
            (31, UrgencyLevel.LOW, "Due in 31 days"),
        ],
    )
    def test_windows(self, days: int, level: UrgencyLevel, message: str) -> None:
        urgency = classify_urgency(_notification(days), TODAY)

        assert urgency.level == level
        assert urgency.message == message

    def test_custom_windows(self) -> None:
        config = NotificationConfig(due_week_days=3, due_month_days=10)

        assert classify_urgency(_notification(5), TODAY, config).level == UrgencyLevel.MEDIUM
        assert classify_urgency(_notification(11), TODAY, config).level == UrgencyLevel.LOW


class TestComputeStats:
    """Tests for compute_stats."""

    def test_counts_and_amounts(self) -> None:
        notifications = [
            _notification(-3, NotificationStatus.OVERDUE, "500", "a"),
            _notification(0, amount="100", notification_id="b"),
            _notification(5, amount="200", notification_id="c"),
            _notification(20, amount="300", notification_id="d"),
            _notification(60, amount="400", notification_id="e"),
        ]

        stats = compute_stats(notifications, TODAY)

        assert stats.total_pending == 4
        assert stats.total_overdue == 1
        assert stats.due_this_week == 2
        assert stats.due_this_month == 3
        assert stats.total_amount_due == Decimal("1500")
        assert stats.total_overdue_amount == Decimal("500")

    def test_month_superset_of_week(self) -> None:
        notifications = [_notification(d, notification_id=str(d)) for d in range(-5, 40)]

        stats = compute_stats(notifications, TODAY)

        assert stats.due_this_month >= stats.due_this_week
        assert stats.due_this_week == 8
        assert stats.due_this_month == 31

    def test_closed_entries_ignored(self) -> None:
        notifications = [
            _notification(1, NotificationStatus.COMPLETED),
            _notification(1, NotificationStatus.DISMISSED),
        ]

        stats = compute_stats(notifications, TODAY)

        assert stats.total_pending == 0
        assert stats.due_this_week == 0
        assert stats.total_amount_due == Decimal("0")

    def test_empty(self) -> None:
        stats = compute_stats([], TODAY)

        assert stats.total_pending == 0
        assert stats.total_overdue == 0
        assert stats.total_amount_due == Decimal("0")
