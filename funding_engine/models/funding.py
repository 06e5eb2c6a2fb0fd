"""Funding commitment, disbursement and derived funding models."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from funding_engine.models.enums import FunderType, FundingStatus, RepaymentType


@dataclass(frozen=True)
class FunderKey:
    """Identity of a funder: an investor or a bank."""

    funder_type: FunderType
    funder_id: str


@dataclass
class Project:
    """Development project that funding is committed to."""

    project_id: str
    name: str
    start_date: date | None = None


@dataclass
class Investor:
    investor_id: str
    name: str


@dataclass
class Bank:
    bank_id: str
    name: str


@dataclass
class ProjectInvestment:
    """Investor commitment to a project."""

    investment_id: str
    project_id: str
    investor_id: str
    amount: Decimal
    investment_date: date
    usage_expiration_date: date | None = None
    grace_period_days: int = 0
    maturity_date: date | None = None
    expected_return: Decimal | None = None  # Percent


@dataclass
class BankCredit:
    """Bank credit line; project_id None means unassigned (OPEX) credit."""

    credit_id: str
    bank_id: str
    project_id: str | None
    credit_type: str
    amount: Decimal
    outstanding_balance: Decimal
    interest_rate: Decimal  # Annual percent (e.g. 4.5)
    start_date: date
    maturity_date: date | None = None
    usage_expiration_date: date | None = None
    grace_period_days: int = 0
    repayment_type: RepaymentType = RepaymentType.MONTHLY
    rate_amount: Decimal = Decimal("0")  # Periodic installment


@dataclass
class FundingCommitment:
    """Normalized investor investment or bank credit."""

    commitment_id: str
    funder_type: FunderType
    funder_id: str
    funder_name: str
    amount: Decimal
    commitment_date: date
    project_id: str | None
    usage_expiration_date: date | None = None
    grace_period_days: int = 0
    maturity_date: date | None = None
    rate: Decimal | None = None  # Expected return or interest rate

    @property
    def funder_key(self) -> FunderKey:
        return FunderKey(self.funder_type, self.funder_id)


@dataclass
class DisbursementRecord:
    """Wire payment to a subcontractor, optionally attributed to a funder."""

    disbursement_id: str
    amount: Decimal
    payment_date: date | None
    subcontractor_id: str
    funder_type: FunderType | None = None
    funder_id: str | None = None
    milestone_id: str | None = None
    contract_id: str | None = None
    notes: str | None = None

    @property
    def funder_key(self) -> FunderKey | None:
        if self.funder_type is None or self.funder_id is None:
            return None
        return FunderKey(self.funder_type, self.funder_id)


@dataclass
class FundingSource:
    """One evaluated commitment. Derived on every read, never persisted."""

    commitment_id: str
    funder_type: FunderType
    funder_id: str
    name: str
    total_amount: Decimal
    spent_amount: Decimal
    available_amount: Decimal
    utilization: Decimal
    status: FundingStatus
    project_id: str | None
    usage_expiration_date: date | None = None
    grace_period_days: int = 0
    commitment_date: date | None = None
    maturity_date: date | None = None
    rate: Decimal | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class ProjectFundingSummary:
    """Aggregate of one project's funding sources."""

    project: Project
    total_committed: Decimal
    total_spent: Decimal
    total_available: Decimal
    utilization: Decimal
    funding_sources: list[FundingSource] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class FundingRollup:
    """Portfolio-wide totals across project summaries."""

    total_committed: Decimal
    total_spent: Decimal
    total_available: Decimal
    utilization: Decimal
    warning_count: int
    project_count: int


@dataclass
class SourceTransaction:
    """Disbursement drawn against a funding source, for drill-down views."""

    disbursement_id: str
    payment_date: date | None
    amount: Decimal
    subcontractor: str
    contract: str
    notes: str | None
    milestone: str | None
