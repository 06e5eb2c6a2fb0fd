"""Funding ledger store with referential integrity."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from funding_engine.exceptions import EntityNotFoundError, ReferentialIntegrityError
from funding_engine.models.enums import FunderType, MilestoneStatus, ScheduleStatus
from funding_engine.models.funding import (
    Bank,
    BankCredit,
    DisbursementRecord,
    FunderKey,
    FundingCommitment,
    Investor,
    Project,
    ProjectInvestment,
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

logger = logging.getLogger(__name__)

_TERMINAL_SCHEDULE_STATUSES = (ScheduleStatus.COMPLETED, ScheduleStatus.DISMISSED)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class LedgerStore:
    """In-memory relational store backing the funding engine.

    Entities are held in id-keyed dicts. Disbursements are append-only and
    indexed by funder and by subcontractor.
    """

    # Master data
    projects: dict[str, Project] = field(default_factory=dict)
    investors: dict[str, Investor] = field(default_factory=dict)
    banks: dict[str, Bank] = field(default_factory=dict)
    investments: dict[str, ProjectInvestment] = field(default_factory=dict)
    credits: dict[str, BankCredit] = field(default_factory=dict)
    subcontractors: dict[str, Subcontractor] = field(default_factory=dict)
    contracts: dict[str, SubcontractorContract] = field(default_factory=dict)

    # Schedules
    schedule: dict[str, BankScheduleEntry] = field(default_factory=dict)
    milestones: dict[str, MilestoneEntry] = field(default_factory=dict)

    # Payments
    disbursements: list[DisbursementRecord] = field(default_factory=list)
    invoices: dict[str, Invoice] = field(default_factory=dict)
    invoice_payments: dict[str, InvoicePayment] = field(default_factory=dict)

    # Relationship indexes
    _credit_schedule: dict[str, list[str]] = field(default_factory=dict)
    _contract_milestones: dict[str, list[str]] = field(default_factory=dict)
    _funder_disbursements: dict[FunderKey, list[int]] = field(default_factory=dict)
    _subcontractor_disbursements: dict[str, list[int]] = field(default_factory=dict)

    def add_project(self, project: Project) -> None:
        """Add a project to the store."""
        self.projects[project.project_id] = project

    def add_investor(self, investor: Investor) -> None:
        """Add an investor to the store."""
        self.investors[investor.investor_id] = investor

    def add_bank(self, bank: Bank) -> None:
        """Add a bank to the store."""
        self.banks[bank.bank_id] = bank

    def add_investment(self, investment: ProjectInvestment) -> None:
        """Add an investor commitment to the store."""
        if investment.project_id not in self.projects:
            raise ReferentialIntegrityError(f"Project {investment.project_id} not found")
        if investment.investor_id not in self.investors:
            raise ReferentialIntegrityError(f"Investor {investment.investor_id} not found")

        self.investments[investment.investment_id] = investment

    def add_credit(self, credit: BankCredit) -> None:
        """Add a bank credit to the store."""
        if credit.bank_id not in self.banks:
            raise ReferentialIntegrityError(f"Bank {credit.bank_id} not found")
        if credit.project_id and credit.project_id not in self.projects:
            raise ReferentialIntegrityError(f"Project {credit.project_id} not found")

        self.credits[credit.credit_id] = credit
        self._credit_schedule.setdefault(credit.credit_id, [])

    def add_subcontractor(self, subcontractor: Subcontractor) -> None:
        """Add a subcontractor to the store."""
        if subcontractor.financed_by is not None:
            self._require_funder(subcontractor.financed_by)
        self.subcontractors[subcontractor.subcontractor_id] = subcontractor
        self._subcontractor_disbursements.setdefault(subcontractor.subcontractor_id, [])

    def add_contract(self, contract: SubcontractorContract) -> None:
        """Add a subcontractor contract to the store."""
        if contract.subcontractor_id not in self.subcontractors:
            raise ReferentialIntegrityError(f"Subcontractor {contract.subcontractor_id} not found")
        if contract.project_id not in self.projects:
            raise ReferentialIntegrityError(f"Project {contract.project_id} not found")

        self.contracts[contract.contract_id] = contract
        self._contract_milestones.setdefault(contract.contract_id, [])

    def add_milestone(self, milestone: MilestoneEntry) -> None:
        """Add a payment milestone to the store."""
        if milestone.contract_id not in self.contracts:
            raise ReferentialIntegrityError(f"Contract {milestone.contract_id} not found")

        self.milestones[milestone.milestone_id] = milestone
        self._contract_milestones[milestone.contract_id].append(milestone.milestone_id)

    def add_schedule_entry(self, entry: BankScheduleEntry) -> None:
        """Add a bank repayment installment to the store."""
        if entry.credit_id not in self.credits:
            raise ReferentialIntegrityError(f"Credit {entry.credit_id} not found")

        if entry.entry_id not in self.schedule:
            self._credit_schedule[entry.credit_id].append(entry.entry_id)
        self.schedule[entry.entry_id] = entry

    def add_disbursement(self, record: DisbursementRecord) -> None:
        """Append a wire payment. Disbursements are never updated or removed."""
        if record.subcontractor_id not in self.subcontractors:
            raise ReferentialIntegrityError(f"Subcontractor {record.subcontractor_id} not found")
        key = record.funder_key
        if key is not None:
            self._require_funder(key)

        idx = len(self.disbursements)
        self.disbursements.append(record)
        self._subcontractor_disbursements[record.subcontractor_id].append(idx)
        if key is not None:
            self._funder_disbursements.setdefault(key, []).append(idx)

    # Lookups
    def get_credit(self, credit_id: str) -> BankCredit:
        try:
            return self.credits[credit_id]
        except KeyError:
            raise EntityNotFoundError(f"Credit {credit_id} not found") from None

    def get_schedule_entry(self, entry_id: str) -> BankScheduleEntry:
        try:
            return self.schedule[entry_id]
        except KeyError:
            raise EntityNotFoundError(f"Schedule entry {entry_id} not found") from None

    def get_milestone(self, milestone_id: str) -> MilestoneEntry:
        try:
            return self.milestones[milestone_id]
        except KeyError:
            raise EntityNotFoundError(f"Milestone {milestone_id} not found") from None

    def get_subcontractor(self, subcontractor_id: str) -> Subcontractor:
        try:
            return self.subcontractors[subcontractor_id]
        except KeyError:
            raise EntityNotFoundError(f"Subcontractor {subcontractor_id} not found") from None

    def funder_name(self, key: FunderKey) -> str:
        """Display name of a funder, with a placeholder for unknown ids."""
        if key.funder_type == FunderType.INVESTOR:
            investor = self.investors.get(key.funder_id)
            return investor.name if investor else "Unknown Investor"
        bank = self.banks.get(key.funder_id)
        return bank.name if bank else "Unknown Bank"

    # Read contracts
    def list_projects(self) -> list[Project]:
        """Projects ordered by start date, newest first; undated last."""
        dated = [p for p in self.projects.values() if p.start_date is not None]
        undated = [p for p in self.projects.values() if p.start_date is None]
        return sorted(dated, key=lambda p: p.start_date, reverse=True) + undated

    def list_commitments(self, project_id: str | None = None) -> list[FundingCommitment]:
        """Investor and bank commitments, for one project or all of them.

        Investments come first, then credits, each in insertion order.
        """
        commitments: list[FundingCommitment] = []

        for inv in self.investments.values():
            if project_id is not None and inv.project_id != project_id:
                continue
            key = FunderKey(FunderType.INVESTOR, inv.investor_id)
            commitments.append(
                FundingCommitment(
                    commitment_id=inv.investment_id,
                    funder_type=FunderType.INVESTOR,
                    funder_id=inv.investor_id,
                    funder_name=self.funder_name(key),
                    amount=inv.amount,
                    commitment_date=inv.investment_date,
                    project_id=inv.project_id,
                    usage_expiration_date=inv.usage_expiration_date,
                    grace_period_days=inv.grace_period_days,
                    maturity_date=inv.maturity_date,
                    rate=inv.expected_return,
                )
            )

        for credit in self.credits.values():
            if project_id is not None and credit.project_id != project_id:
                continue
            key = FunderKey(FunderType.BANK, credit.bank_id)
            commitments.append(
                FundingCommitment(
                    commitment_id=credit.credit_id,
                    funder_type=FunderType.BANK,
                    funder_id=credit.bank_id,
                    funder_name=self.funder_name(key),
                    amount=credit.amount,
                    commitment_date=credit.start_date,
                    project_id=credit.project_id,
                    usage_expiration_date=credit.usage_expiration_date,
                    grace_period_days=credit.grace_period_days,
                    maturity_date=credit.maturity_date,
                    rate=credit.interest_rate,
                )
            )

        return commitments

    def list_disbursements(self, funder_keys: Iterable[FunderKey]) -> list[DisbursementRecord]:
        """Disbursements attributed to any of the given funders, in payment order."""
        indices: set[int] = set()
        for key in set(funder_keys):
            indices.update(self._funder_disbursements.get(key, []))
        return [self.disbursements[i] for i in sorted(indices)]

    def list_subcontractor_disbursements(self, subcontractor_id: str) -> list[DisbursementRecord]:
        """All wire payments made to a subcontractor, attributed or not."""
        indices = self._subcontractor_disbursements.get(subcontractor_id, [])
        return [self.disbursements[i] for i in indices]

    def list_bank_schedule_entries(
        self,
        status: ScheduleStatus | None = None,
        due_before: date | None = None,
        bank_id: str | None = None,
    ) -> list[BankScheduleRow]:
        """Installments joined with display fields, ordered by due date.

        ``due_before`` is inclusive.
        """
        rows: list[BankScheduleRow] = []
        for entry in self.schedule.values():
            if status is not None and entry.status != status:
                continue
            if due_before is not None and entry.due_date > due_before:
                continue
            credit = self.credits.get(entry.credit_id)
            if bank_id is not None and (credit is None or credit.bank_id != bank_id):
                continue

            project = self.projects.get(credit.project_id) if credit and credit.project_id else None
            bank = self.banks.get(credit.bank_id) if credit else None
            rows.append(
                BankScheduleRow(
                    entry=entry,
                    bank_id=credit.bank_id if credit else "",
                    bank_name=bank.name if bank else "Unknown Bank",
                    credit_type=credit.credit_type if credit and credit.credit_type else "N/A",
                    project_name=project.name if project else "No Project",
                )
            )
        rows.sort(key=lambda r: r.entry.due_date)
        return rows

    def list_milestone_schedule_entries(self, due_before: date | None = None) -> list[MilestoneRow]:
        """Milestones joined with contract and subcontractor fields.

        Milestones without a due date are included; callers decide whether
        they are notifications. ``due_before`` is inclusive and drops undated
        milestones.
        """
        rows: list[MilestoneRow] = []
        for milestone in self.milestones.values():
            if due_before is not None and (milestone.due_date is None or milestone.due_date > due_before):
                continue
            contract = self.contracts[milestone.contract_id]
            subcontractor = self.subcontractors.get(contract.subcontractor_id)
            project = self.projects.get(contract.project_id)
            rows.append(
                MilestoneRow(
                    milestone=milestone,
                    contract_id=contract.contract_id,
                    contract_value=contract.contract_value,
                    subcontractor_id=contract.subcontractor_id,
                    subcontractor_name=subcontractor.name if subcontractor else "Unknown",
                    project_name=project.name if project else "No Project",
                )
            )
        return rows

    # Write contracts
    def dismiss_bank_entry(self, entry_id: str, actor_id: str, timestamp: datetime) -> None:
        entry = self.get_schedule_entry(entry_id)
        entry.status = ScheduleStatus.DISMISSED
        entry.dismissed_at = timestamp
        entry.dismissed_by = actor_id

    def reopen_bank_entry(self, entry_id: str) -> None:
        entry = self.get_schedule_entry(entry_id)
        entry.status = ScheduleStatus.PENDING
        entry.dismissed_at = None
        entry.dismissed_by = None

    def complete_bank_entry(self, entry_id: str, timestamp: datetime) -> None:
        entry = self.get_schedule_entry(entry_id)
        entry.status = ScheduleStatus.COMPLETED
        entry.completed_at = timestamp

    def mark_milestone_complete(self, milestone_id: str) -> None:
        self.get_milestone(milestone_id).status = MilestoneStatus.COMPLETED

    def mark_milestone_paid(self, milestone_id: str, paid_date: date) -> None:
        milestone = self.get_milestone(milestone_id)
        milestone.status = MilestoneStatus.PAID
        milestone.paid_date = paid_date

    def create_invoice(
        self,
        credit_id: str,
        amount: Decimal,
        issue_date: date,
        description: str,
        created_by: str | None = None,
    ) -> Invoice:
        """Create the expense invoice for a bank credit payment."""
        self.get_credit(credit_id)
        invoice = Invoice(
            invoice_id=_new_id(),
            invoice_number=f"BANK-{len(self.invoices) + 1:06d}",
            credit_id=credit_id,
            issue_date=issue_date,
            base_amount=amount,
            description=description,
            created_by=created_by,
        )
        self.invoices[invoice.invoice_id] = invoice
        return invoice

    def create_invoice_payment(
        self,
        invoice_id: str,
        amount: Decimal,
        payment_date: date,
        description: str,
        created_by: str | None = None,
    ) -> InvoicePayment:
        """Record a wire payment settling an invoice."""
        if invoice_id not in self.invoices:
            raise ReferentialIntegrityError(f"Invoice {invoice_id} not found")
        payment = InvoicePayment(
            payment_id=_new_id(),
            invoice_id=invoice_id,
            payment_date=payment_date,
            amount=amount,
            reference_number=self.invoices[invoice_id].credit_id,
            description=description,
            created_by=created_by,
        )
        self.invoice_payments[payment.payment_id] = payment
        return payment

    def reduce_outstanding_balance(self, credit_id: str, amount: Decimal) -> Decimal:
        """Decrement a credit's outstanding balance; returns the new balance."""
        credit = self.get_credit(credit_id)
        credit.outstanding_balance = credit.outstanding_balance - amount
        return credit.outstanding_balance

    def record_bank_payment(
        self,
        credit_id: str,
        amount: Decimal,
        payment_date: date,
        notes: str,
        created_by: str | None = None,
    ) -> BankPaymentReceipt:
        """Create the invoice and payment pair and decrement the balance."""
        description = notes or "Bank credit payment"
        invoice = self.create_invoice(credit_id, amount, payment_date, description, created_by)
        payment = self.create_invoice_payment(
            invoice.invoice_id, amount, payment_date, description, created_by
        )
        self.reduce_outstanding_balance(credit_id, amount)
        return BankPaymentReceipt(invoice_id=invoice.invoice_id, payment_id=payment.payment_id)

    def create_wire_payment(
        self,
        subcontractor_id: str,
        milestone_id: str | None,
        amount: Decimal,
        payment_date: date,
        notes: str | None,
        paid_by: FunderKey | None = None,
    ) -> DisbursementRecord:
        """Append a subcontractor wire payment, optionally attributed to a funder."""
        contract_id = None
        if milestone_id is not None:
            contract_id = self.get_milestone(milestone_id).contract_id
        record = DisbursementRecord(
            disbursement_id=_new_id(),
            amount=amount,
            payment_date=payment_date,
            subcontractor_id=subcontractor_id,
            funder_type=paid_by.funder_type if paid_by else None,
            funder_id=paid_by.funder_id if paid_by else None,
            milestone_id=milestone_id,
            contract_id=contract_id,
            notes=notes,
        )
        self.add_disbursement(record)
        return record

    def record_subcontractor_payment(
        self,
        subcontractor_id: str,
        milestone_id: str,
        amount: Decimal,
        payment_date: date,
        notes: str | None,
        paid_by: FunderKey | None = None,
    ) -> str:
        """Record a milestone wire payment and mark the milestone paid."""
        record = self.create_wire_payment(
            subcontractor_id, milestone_id, amount, payment_date, notes, paid_by
        )
        self.mark_milestone_paid(milestone_id, payment_date)
        return record.disbursement_id

    def mark_overdue(self, today: date) -> int:
        """Promote pending installments past their due date to overdue."""
        promoted = 0
        for entry in self.schedule.values():
            if entry.status == ScheduleStatus.PENDING and entry.due_date < today:
                entry.status = ScheduleStatus.OVERDUE
                promoted += 1
        return promoted

    def replace_schedule(self, credit_id: str, entries: list[BankScheduleEntry]) -> int:
        """Regenerate a credit's installments.

        Completed and dismissed installments are kept as they are; every other
        installment is replaced by the generated one with the same id, and
        installments that no longer exist in the new schedule are removed.
        Returns the number of entries written.
        """
        self.get_credit(credit_id)
        kept = {
            eid
            for eid in self._credit_schedule[credit_id]
            if self.schedule[eid].status in _TERMINAL_SCHEDULE_STATUSES
        }
        for eid in self._credit_schedule[credit_id]:
            if eid not in kept:
                del self.schedule[eid]
        self._credit_schedule[credit_id] = [eid for eid in self._credit_schedule[credit_id] if eid in kept]

        written = 0
        for entry in entries:
            if entry.credit_id != credit_id:
                raise ReferentialIntegrityError(
                    f"Entry {entry.entry_id} belongs to credit {entry.credit_id}, not {credit_id}"
                )
            if entry.entry_id in kept:
                continue
            self.add_schedule_entry(entry)
            written += 1
        logger.debug("Replaced schedule for credit %s: %d written, %d kept", credit_id, written, len(kept))
        return written

    def _require_funder(self, key: FunderKey) -> None:
        if key.funder_type == FunderType.INVESTOR and key.funder_id not in self.investors:
            raise ReferentialIntegrityError(f"Investor {key.funder_id} not found")
        if key.funder_type == FunderType.BANK and key.funder_id not in self.banks:
            raise ReferentialIntegrityError(f"Bank {key.funder_id} not found")

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "projects": len(self.projects),
            "investors": len(self.investors),
            "banks": len(self.banks),
            "investments": len(self.investments),
            "credits": len(self.credits),
            "subcontractors": len(self.subcontractors),
            "contracts": len(self.contracts),
            "milestones": len(self.milestones),
            "schedule_entries": len(self.schedule),
            "disbursements": len(self.disbursements),
            "invoices": len(self.invoices),
            "invoice_payments": len(self.invoice_payments),
        }
