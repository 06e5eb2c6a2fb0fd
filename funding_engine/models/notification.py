"""Unified payment notification models.

A notification is a tagged union over the two schedule kinds. Both variants
share ``due_date``, ``amount``, ``status`` and ``urgency()``; the ``source``
discriminator tells them apart without probing for optional fields.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from funding_engine.config import NotificationConfig
from funding_engine.models.enums import (
    NotificationSource,
    NotificationStatus,
    NotificationType,
    StepStatus,
    UrgencyLevel,
)


@dataclass
class Urgency:
    level: UrgencyLevel
    days_remaining: int
    message: str


@dataclass
class PaymentNotification:
    """Fields common to every notification variant."""

    notification_id: str
    due_date: date
    amount: Decimal
    status: NotificationStatus
    notification_type: NotificationType
    project_name: str

    @property
    def is_closed(self) -> bool:
        return self.status in (NotificationStatus.COMPLETED, NotificationStatus.DISMISSED)

    def days_remaining(self, today: date) -> int:
        return (self.due_date - today).days

    def urgency(self, today: date, config: NotificationConfig | None = None) -> Urgency:
        return classify_urgency(self, today, config)


@dataclass
class BankNotification(PaymentNotification):
    """Bank credit repayment installment."""

    bank_credit_id: str
    bank_id: str
    bank_name: str
    credit_type: str
    payment_number: int
    dismissed_at: datetime | None = None
    dismissed_by: str | None = None
    source: NotificationSource = field(default=NotificationSource.BANK, init=False)


@dataclass
class SubcontractorNotification(PaymentNotification):
    """Subcontractor milestone payment."""

    milestone_id: str
    contract_id: str
    subcontractor_id: str
    subcontractor_name: str
    milestone_name: str
    milestone_percentage: Decimal
    contract_value: Decimal
    source: NotificationSource = field(default=NotificationSource.SUBCONTRACTOR, init=False)


def _plural(n: int) -> str:
    return "" if n == 1 else "s"


def classify_urgency(
    notification: PaymentNotification,
    today: date,
    config: NotificationConfig | None = None,
) -> Urgency:
    """Classify how soon a notification is due.

    The overdue check runs before the due-today check, so an entry flagged
    overdue is never reported as due today.
    """
    config = config or NotificationConfig()
    days = notification.days_remaining(today)

    if notification.status == NotificationStatus.OVERDUE or days < 0:
        overdue_by = abs(days)
        return Urgency(
            level=UrgencyLevel.CRITICAL,
            days_remaining=days,
            message=f"Overdue by {overdue_by} day{_plural(overdue_by)}",
        )

    if days == 0:
        return Urgency(level=UrgencyLevel.CRITICAL, days_remaining=0, message="Due today")

    if days <= config.due_week_days:
        return Urgency(
            level=UrgencyLevel.HIGH,
            days_remaining=days,
            message=f"Due in {days} day{_plural(days)}",
        )

    if days <= config.due_month_days:
        return Urgency(level=UrgencyLevel.MEDIUM, days_remaining=days, message=f"Due in {days} days")

    return Urgency(level=UrgencyLevel.LOW, days_remaining=days, message=f"Due in {days} days")


@dataclass
class NotificationStats:
    """Dashboard counters over the visible notification set."""

    total_pending: int = 0
    total_overdue: int = 0
    due_this_week: int = 0
    due_this_month: int = 0
    total_amount_due: Decimal = Decimal("0")
    total_overdue_amount: Decimal = Decimal("0")


@dataclass
class PaymentStep:
    name: str
    status: StepStatus = StepStatus.PENDING
    error: str | None = None
    result: str | None = None  # Id of the record the step created, if any


@dataclass
class PaymentWorkflow:
    """Ordered record of a multi-step payment write.

    Steps are committed one at a time with no transaction around them, so a
    failure leaves earlier steps in place.
    """

    notification_id: str
    source: NotificationSource
    steps: list[PaymentStep] = field(default_factory=list)

    @property
    def completed_steps(self) -> list[PaymentStep]:
        return [s for s in self.steps if s.status == StepStatus.DONE]

    @property
    def failed_step(self) -> PaymentStep | None:
        for step in self.steps:
            if step.status == StepStatus.FAILED:
                return step
        return None

    @property
    def succeeded(self) -> bool:
        return bool(self.steps) and all(s.status == StepStatus.DONE for s in self.steps)
