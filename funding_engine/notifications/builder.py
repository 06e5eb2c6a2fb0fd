"""Build the unified payment notification stream.

Bank installments and subcontractor milestones are derived independently,
then merged and stably sorted by due date. Derivation is pure: the same
schedule rows and the same ``today`` always yield the same list.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable

from funding_engine.config import NotificationConfig
from funding_engine.exceptions import store_access
from funding_engine.models.enums import (
    MilestoneStatus,
    NotificationStatus,
    NotificationType,
    NotificationView,
    ScheduleStatus,
)
from funding_engine.models.notification import (
    BankNotification,
    PaymentNotification,
    SubcontractorNotification,
)
from funding_engine.models.schedule import BankScheduleRow, MilestoneRow
from funding_engine.store.ledger import LedgerStore

logger = logging.getLogger(__name__)


def bank_notification(row: BankScheduleRow, today: date) -> BankNotification:
    """Carry an installment through; a pending past-due entry reads as overdue."""
    entry = row.entry
    status = NotificationStatus(entry.status.value)
    if entry.status == ScheduleStatus.PENDING and entry.due_date < today:
        status = NotificationStatus.OVERDUE

    return BankNotification(
        notification_id=entry.entry_id,
        due_date=entry.due_date,
        amount=entry.amount,
        status=status,
        notification_type=entry.notification_type,
        project_name=row.project_name,
        bank_credit_id=entry.credit_id,
        bank_id=row.bank_id,
        bank_name=row.bank_name,
        credit_type=row.credit_type,
        payment_number=entry.payment_number,
        dismissed_at=entry.dismissed_at,
        dismissed_by=entry.dismissed_by,
    )


def milestone_notification(row: MilestoneRow, today: date) -> SubcontractorNotification | None:
    """Derive a milestone notification; undated milestones yield nothing."""
    milestone = row.milestone
    if milestone.due_date is None:
        return None

    if milestone.status == MilestoneStatus.PENDING:
        if milestone.due_date < today:
            status = NotificationStatus.OVERDUE
        else:
            status = NotificationStatus.PENDING
    else:
        status = NotificationStatus.COMPLETED

    return SubcontractorNotification(
        notification_id=milestone.milestone_id,
        due_date=milestone.due_date,
        amount=row.contract_value * milestone.percentage / 100,
        status=status,
        notification_type=NotificationType.MILESTONE,
        project_name=row.project_name,
        milestone_id=milestone.milestone_id,
        contract_id=row.contract_id,
        subcontractor_id=row.subcontractor_id,
        subcontractor_name=row.subcontractor_name,
        milestone_name=milestone.milestone_name,
        milestone_percentage=milestone.percentage,
        contract_value=row.contract_value,
    )


def build_notifications(
    bank_rows: Iterable[BankScheduleRow],
    milestone_rows: Iterable[MilestoneRow],
    today: date,
) -> list[PaymentNotification]:
    """Merge both schedules into one list ordered by due date.

    The sort is stable: bank entries precede milestones sharing a due date,
    and each keeps its input order.
    """
    notifications: list[PaymentNotification] = [bank_notification(r, today) for r in bank_rows]
    for row in milestone_rows:
        notification = milestone_notification(row, today)
        if notification is not None:
            notifications.append(notification)

    notifications.sort(key=lambda n: n.due_date)
    return notifications


def visible_notifications(
    notifications: Iterable[PaymentNotification],
    include_closed: bool = False,
) -> list[PaymentNotification]:
    """Active view: drop dismissed and completed entries unless asked not to."""
    if include_closed:
        return list(notifications)
    return [n for n in notifications if not n.is_closed]


def filter_notifications(
    notifications: Iterable[PaymentNotification],
    view: NotificationView,
    today: date,
    config: NotificationConfig | None = None,
) -> list[PaymentNotification]:
    """Apply one of the dashboard filters (all, overdue, week, month)."""
    config = config or NotificationConfig()
    view = NotificationView(view)

    if view == NotificationView.OVERDUE:
        return [n for n in notifications if n.status == NotificationStatus.OVERDUE]
    if view == NotificationView.WEEK:
        return [n for n in notifications if 0 <= n.days_remaining(today) <= config.due_week_days]
    if view == NotificationView.MONTH:
        return [n for n in notifications if 0 <= n.days_remaining(today) <= config.due_month_days]
    return list(notifications)


def fetch_notifications(
    store: LedgerStore,
    today: date,
    status: ScheduleStatus | None = None,
    bank_id: str | None = None,
    days_ahead: int | None = None,
    include_closed: bool = False,
) -> list[PaymentNotification]:
    """Read both schedules from the store and build the visible list.

    ``status`` narrows the bank installments only and matches the stored
    status, so ``ScheduleStatus.PENDING`` still returns past-due installments
    that the sweep has not promoted yet; those read as overdue. Filtering by
    ``bank_id`` leaves out milestones entirely. ``days_ahead`` applies to both.
    """
    due_before = today + timedelta(days=days_ahead) if days_ahead else None
    with store_access("read payment schedules"):
        bank_rows = store.list_bank_schedule_entries(status=status, due_before=due_before, bank_id=bank_id)
        if bank_id is None:
            milestone_rows = store.list_milestone_schedule_entries(due_before=due_before)
        else:
            milestone_rows = []

    notifications = visible_notifications(
        build_notifications(bank_rows, milestone_rows, today),
        include_closed=include_closed,
    )
    logger.debug(
        "Built %d notifications from %d installments and %d milestones",
        len(notifications),
        len(bank_rows),
        len(milestone_rows),
    )
    return notifications
