"""Domain models for funding allocation and payment notifications."""

from funding_engine.models.enums import (
    FunderType,
    FundingStatus,
    MilestoneStatus,
    NotificationSource,
    NotificationStatus,
    NotificationType,
    NotificationView,
    RepaymentType,
    ScheduleStatus,
    StepStatus,
    UrgencyLevel,
)
from funding_engine.models.funding import (
    Bank,
    BankCredit,
    DisbursementRecord,
    FunderKey,
    FundingCommitment,
    FundingRollup,
    FundingSource,
    Investor,
    Project,
    ProjectFundingSummary,
    ProjectInvestment,
    SourceTransaction,
)
from funding_engine.models.notification import (
    BankNotification,
    NotificationStats,
    PaymentNotification,
    PaymentStep,
    PaymentWorkflow,
    SubcontractorNotification,
    Urgency,
)
from funding_engine.models.schedule import (
    BankPaymentReceipt,
    BankScheduleEntry,
    BankScheduleRow,
    Invoice,
    InvoicePayment,
    MilestoneEntry,
    MilestoneRow,
    Subcontractor,
    SubcontractorContract,
)

__all__ = [
    "Bank",
    "BankCredit",
    "BankNotification",
    "BankPaymentReceipt",
    "BankScheduleEntry",
    "BankScheduleRow",
    "DisbursementRecord",
    "FunderKey",
    "FunderType",
    "FundingCommitment",
    "FundingRollup",
    "FundingSource",
    "FundingStatus",
    "Investor",
    "Invoice",
    "InvoicePayment",
    "MilestoneEntry",
    "MilestoneRow",
    "MilestoneStatus",
    "NotificationSource",
    "NotificationStats",
    "NotificationStatus",
    "NotificationType",
    "NotificationView",
    "PaymentNotification",
    "PaymentStep",
    "PaymentWorkflow",
    "Project",
    "ProjectFundingSummary",
    "ProjectInvestment",
    "RepaymentType",
    "ScheduleStatus",
    "SourceTransaction",
    "StepStatus",
    "Subcontractor",
    "SubcontractorContract",
    "SubcontractorNotification",
    "Urgency",
    "UrgencyLevel",
]
