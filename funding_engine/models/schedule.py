"""Payment schedule models: bank installments and subcontractor milestones."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from funding_engine.models.enums import MilestoneStatus, NotificationType, ScheduleStatus
from funding_engine.models.funding import FunderKey


@dataclass
class Subcontractor:
    subcontractor_id: str
    name: str
    financed_by: FunderKey | None = None  # Default attribution for payments


@dataclass
class SubcontractorContract:
    contract_id: str
    subcontractor_id: str
    project_id: str
    contract_value: Decimal
    contract_number: str


@dataclass
class BankScheduleEntry:
    """Bank credit repayment installment."""

    entry_id: str
    credit_id: str
    payment_number: int  # 1, 2, 3, ...
    due_date: date
    amount: Decimal
    notification_type: NotificationType
    status: ScheduleStatus = ScheduleStatus.PENDING
    dismissed_at: datetime | None = None
    dismissed_by: str | None = None
    completed_at: datetime | None = None


@dataclass
class MilestoneEntry:
    """Subcontractor payment milestone, a percentage of the contract value."""

    milestone_id: str
    contract_id: str
    milestone_name: str
    percentage: Decimal
    due_date: date | None
    status: MilestoneStatus = MilestoneStatus.PENDING
    paid_date: date | None = None


@dataclass
class BankScheduleRow:
    """Installment joined with credit, bank and project display fields."""

    entry: BankScheduleEntry
    bank_id: str
    bank_name: str
    credit_type: str
    project_name: str


@dataclass
class MilestoneRow:
    """Milestone joined with contract, subcontractor and project fields."""

    milestone: MilestoneEntry
    contract_id: str
    contract_value: Decimal
    subcontractor_id: str
    subcontractor_name: str
    project_name: str


@dataclass
class Invoice:
    """Accounting expense invoice created for a bank credit payment."""

    invoice_id: str
    invoice_number: str
    credit_id: str
    issue_date: date
    base_amount: Decimal
    description: str
    created_by: str | None = None
    category: str = "Bank Credit Payment"


@dataclass
class InvoicePayment:
    payment_id: str
    invoice_id: str
    payment_date: date
    amount: Decimal
    reference_number: str
    description: str
    created_by: str | None = None
    payment_method: str = "WIRE"


@dataclass
class BankPaymentReceipt:
    invoice_id: str
    payment_id: str
