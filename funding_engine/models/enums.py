"""Enumeration types for funding and notification entities."""

from enum import Enum


class FunderType(str, Enum):
    INVESTOR = "investor"
    BANK = "bank"


class FundingStatus(str, Enum):
    ACTIVE = "active"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"
    DEPLETED = "depleted"


class RepaymentType(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ScheduleStatus(str, Enum):
    """Persisted status of a bank repayment installment."""

    PENDING = "pending"
    OVERDUE = "overdue"
    COMPLETED = "completed"
    DISMISSED = "dismissed"


class MilestoneStatus(str, Enum):
    """Persisted status of a subcontractor milestone.

    PAID means a wire payment was recorded; COMPLETED means the milestone was
    closed by an operator without a recorded payment.
    """

    PENDING = "pending"
    PAID = "paid"
    COMPLETED = "completed"


class NotificationSource(str, Enum):
    BANK = "bank"
    SUBCONTRACTOR = "subcontractor"


class NotificationStatus(str, Enum):
    PENDING = "pending"
    OVERDUE = "overdue"
    COMPLETED = "completed"
    DISMISSED = "dismissed"


class NotificationType(str, Enum):
    FIRST_PAYMENT = "first_payment"
    RECURRING = "recurring"
    FINAL_PAYMENT = "final_payment"
    MILESTONE = "milestone"


class UrgencyLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class NotificationView(str, Enum):
    ALL = "all"
    OVERDUE = "overdue"
    WEEK = "week"
    MONTH = "month"


class StepStatus(str, Enum):
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"
