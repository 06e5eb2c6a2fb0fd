"""Tests for notification derivation."""

from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest

from funding_engine.exceptions import DataAccessError
from funding_engine.models.enums import (
    MilestoneStatus,
    NotificationSource,
    NotificationStatus,
    NotificationType,
    NotificationView,
    ScheduleStatus,
    UrgencyLevel,
)
from funding_engine.models.notification import BankNotification, SubcontractorNotification
from funding_engine.models.schedule import (
    BankScheduleEntry,
    BankScheduleRow,
    MilestoneEntry,
    MilestoneRow,
)
from funding_engine.notifications.builder import (
    bank_notification,
    build_notifications,
    fetch_notifications,
    filter_notifications,
    milestone_notification,
    visible_notifications,
)
from funding_engine.store.ledger import LedgerStore

TODAY = date(2025, 6, 15)


def _bank_row(entry_id: str, due: date, status: ScheduleStatus = ScheduleStatus.PENDING) -> BankScheduleRow:
    return BankScheduleRow(
        entry=BankScheduleEntry(
            entry_id=entry_id,
            credit_id="credit-001",
            payment_number=1,
            due_date=due,
            amount=Decimal("1000"),
            notification_type=NotificationType.RECURRING,
            status=status,
        ),
        bank_id="bank-001",
        bank_name="First Bank",
        credit_type="term_loan",
        project_name="Harbor View",
    )


def _milestone_row(
    milestone_id: str,
    due: date | None,
    percentage: str = "20",
    status: MilestoneStatus = MilestoneStatus.PENDING,
) -> MilestoneRow:
    return MilestoneRow(
        milestone=MilestoneEntry(
            milestone_id=milestone_id,
            contract_id="contract-001",
            milestone_name="Foundation",
            percentage=Decimal(percentage),
            due_date=due,
            status=status,
        ),
        contract_id="contract-001",
        contract_value=Decimal("100000"),
        subcontractor_id="sub-001",
        subcontractor_name="Acme Builders",
        project_name="Harbor View",
    )


class TestBankNotification:
    """Tests for bank_notification."""

    def test_fields_carried(self) -> None:
        n = bank_notification(_bank_row("e-1", date(2025, 7, 1)), TODAY)

        assert isinstance(n, BankNotification)
        assert n.source == NotificationSource.BANK
        assert n.notification_id == "e-1"
        assert n.bank_name == "First Bank"
        assert n.credit_type == "term_loan"
        assert n.status == NotificationStatus.PENDING

    def test_pending_past_due_reads_overdue(self) -> None:
        row = _bank_row("e-1", date(2025, 6, 12))

        n = bank_notification(row, TODAY)

        assert n.status == NotificationStatus.OVERDUE
        # Read-time promotion does not write back
        assert row.entry.status == ScheduleStatus.PENDING

    def test_due_today_stays_pending(self) -> None:
        assert bank_notification(_bank_row("e-1", TODAY), TODAY).status == NotificationStatus.PENDING

    def test_dismissed_carried(self) -> None:
        n = bank_notification(_bank_row("e-1", date(2025, 6, 1), ScheduleStatus.DISMISSED), TODAY)

        assert n.status == NotificationStatus.DISMISSED


class TestMilestoneNotification:
    """Tests for milestone_notification."""

    def test_amount_and_urgency(self) -> None:
        n = milestone_notification(_milestone_row("ms-1", date(2025, 6, 20)), TODAY)

        assert isinstance(n, SubcontractorNotification)
        assert n.source == NotificationSource.SUBCONTRACTOR
        assert n.notification_type == NotificationType.MILESTONE
        assert n.amount == Decimal("20000")
        assert n.status == NotificationStatus.PENDING

        urgency = n.urgency(TODAY)
        assert urgency.level == UrgencyLevel.HIGH
        assert urgency.message == "Due in 5 days"

    def test_undated_yields_nothing(self) -> None:
        assert milestone_notification(_milestone_row("ms-1", None), TODAY) is None

    def test_pending_past_due_is_overdue(self) -> None:
        n = milestone_notification(_milestone_row("ms-1", date(2025, 6, 1)), TODAY)

        assert n.status == NotificationStatus.OVERDUE

    def test_paid_and_completed_are_completed(self) -> None:
        paid = milestone_notification(
            _milestone_row("ms-1", date(2025, 6, 1), status=MilestoneStatus.PAID), TODAY
        )
        closed = milestone_notification(
            _milestone_row("ms-2", date(2025, 6, 1), status=MilestoneStatus.COMPLETED), TODAY
        )

        assert paid.status == NotificationStatus.COMPLETED
        assert closed.status == NotificationStatus.COMPLETED


class TestBuildNotifications:
    """Tests for build_notifications."""

    def test_sorted_by_due_date(self) -> None:
        notifications = build_notifications(
            [_bank_row("e-2", date(2025, 8, 1)), _bank_row("e-1", date(2025, 6, 1))],
            [_milestone_row("ms-1", date(2025, 7, 1))],
            TODAY,
        )

        dues = [n.due_date for n in notifications]
        assert dues == sorted(dues)
        assert [n.notification_id for n in notifications] == ["e-1", "ms-1", "e-2"]

    def test_stable_for_equal_due_dates(self) -> None:
        due = date(2025, 7, 1)
        notifications = build_notifications(
            [_bank_row("e-1", due), _bank_row("e-2", due)],
            [_milestone_row("ms-1", due), _milestone_row("ms-2", due)],
            TODAY,
        )

        assert [n.notification_id for n in notifications] == ["e-1", "e-2", "ms-1", "ms-2"]

    def test_idempotent(self) -> None:
        bank_rows = [_bank_row("e-1", date(2025, 6, 1))]
        milestone_rows = [_milestone_row("ms-1", date(2025, 7, 1))]

        first = build_notifications(bank_rows, milestone_rows, TODAY)
        second = build_notifications(bank_rows, milestone_rows, TODAY)

        assert first == second

    def test_undated_milestones_skipped(self) -> None:
        notifications = build_notifications([], [_milestone_row("ms-1", None)], TODAY)

        assert notifications == []


class TestVisibleAndFilter:
    """Tests for visible_notifications and filter_notifications."""

    def _notifications(self) -> list:
        return build_notifications(
            [
                _bank_row("overdue", date(2025, 6, 10)),
                _bank_row("today", TODAY),
                _bank_row("week", date(2025, 6, 22)),
                _bank_row("month", date(2025, 7, 10)),
                _bank_row("later", date(2025, 9, 1)),
                _bank_row("done", date(2025, 6, 16), ScheduleStatus.COMPLETED),
                _bank_row("dismissed", date(2025, 6, 16), ScheduleStatus.DISMISSED),
            ],
            [],
            TODAY,
        )

    def test_visible_drops_closed(self) -> None:
        visible = visible_notifications(self._notifications())

        ids = {n.notification_id for n in visible}
        assert "done" not in ids
        assert "dismissed" not in ids
        assert len(visible) == 5

    def test_visible_include_closed(self) -> None:
        assert len(visible_notifications(self._notifications(), include_closed=True)) == 7

    def test_filter_overdue(self) -> None:
        result = filter_notifications(self._notifications(), NotificationView.OVERDUE, TODAY)

        assert [n.notification_id for n in result] == ["overdue"]

    def test_filter_week(self) -> None:
        visible = visible_notifications(self._notifications())

        result = filter_notifications(visible, NotificationView.WEEK, TODAY)

        assert [n.notification_id for n in result] == ["today", "week"]

    def test_filter_month_superset_of_week(self) -> None:
        visible = visible_notifications(self._notifications())

        week = filter_notifications(visible, NotificationView.WEEK, TODAY)
        month = filter_notifications(visible, NotificationView.MONTH, TODAY)

        assert {n.notification_id for n in week} <= {n.notification_id for n in month}
        assert [n.notification_id for n in month] == ["today", "week", "month"]

    def test_filter_all_accepts_string(self) -> None:
        result = filter_notifications(self._notifications(), "all", TODAY)

        assert len(result) == 7


class TestFetchNotifications:
    """Tests for fetch_notifications against the store."""

    def test_visible_list(self, store: LedgerStore, today: date) -> None:
        notifications = fetch_notifications(store, today)

        assert [n.notification_id for n in notifications] == [
            "credit-001-001",
            "credit-001-002",
            "ms-001",
            "credit-001-003",
        ]
        assert notifications[0].status == NotificationStatus.OVERDUE

    def test_include_closed(self, store: LedgerStore, today: date) -> None:
        notifications = fetch_notifications(store, today, include_closed=True)

        assert len(notifications) == 6

    def test_days_ahead(self, store: LedgerStore, today: date) -> None:
        notifications = fetch_notifications(store, today, days_ahead=7)

        assert [n.notification_id for n in notifications] == [
            "credit-001-001",
            "credit-001-002",
            "ms-001",
        ]

    def test_bank_filter_excludes_milestones(self, store: LedgerStore, today: date) -> None:
        notifications = fetch_notifications(store, today, bank_id="bank-001")

        assert all(n.source == NotificationSource.BANK for n in notifications)
        assert len(notifications) == 3

    def test_status_narrows_bank_only(self, store: LedgerStore, today: date) -> None:
        notifications = fetch_notifications(store, today, status=ScheduleStatus.OVERDUE)

        assert [n.notification_id for n in notifications] == ["ms-001"]

    def test_pending_status_matches_stored_status(self, store: LedgerStore, today: date) -> None:
        """Unswept past-due installments are still stored as pending but read as overdue."""
        notifications = fetch_notifications(store, today, status=ScheduleStatus.PENDING)
        by_id = {n.notification_id: n for n in notifications}

        assert set(by_id) == {"credit-001-001", "credit-001-002", "credit-001-003", "ms-001"}
        assert by_id["credit-001-001"].status == NotificationStatus.OVERDUE

    def test_installment_read_failure_wrapped(self, store: LedgerStore, today: date) -> None:
        with patch.object(LedgerStore, "list_bank_schedule_entries", side_effect=RuntimeError("db down")):
            with pytest.raises(DataAccessError, match="db down"):
                fetch_notifications(store, today)

    def test_milestone_read_failure_wrapped(self, store: LedgerStore, today: date) -> None:
        with patch.object(
            LedgerStore, "list_milestone_schedule_entries", side_effect=RuntimeError("db down")
        ):
            with pytest.raises(DataAccessError, match="read payment schedules"):
                fetch_notifications(store, today)
