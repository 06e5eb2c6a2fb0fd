"""Funding ledger reader: side-effect-free access to commitments and payments."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from funding_engine.exceptions import store_access
from funding_engine.models.enums import FunderType
from funding_engine.models.funding import (
    Bank,
    DisbursementRecord,
    FunderKey,
    FundingCommitment,
    FundingSource,
    Investor,
    Project,
    SourceTransaction,
)
from funding_engine.store.ledger import LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class FundingSnapshot:
    """Commitments plus the disbursements of the funders they reference."""

    projects: list[Project] = field(default_factory=list)
    commitments: list[FundingCommitment] = field(default_factory=list)
    disbursements: list[DisbursementRecord] = field(default_factory=list)


@dataclass
class ProjectFunders:
    """Unique investors and banks holding commitments on a project."""

    investors: list[Investor] = field(default_factory=list)
    banks: list[Bank] = field(default_factory=list)


class FundingLedgerReader:
    """Read commitments and disbursements from the ledger store.

    Store failures surface as ``DataAccessError``; nothing is retried here.
    """

    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def snapshot(self, project_id: str | None = None) -> FundingSnapshot:
        """Fetch commitments for one project (or all) and their funders' disbursements."""
        with store_access("read funding ledger"):
            if project_id is None:
                projects = self.store.list_projects()
            else:
                project = self.store.projects.get(project_id)
                projects = [project] if project is not None else []
            commitments = self.store.list_commitments(project_id)
            keys = {c.funder_key for c in commitments}
            disbursements = self.store.list_disbursements(keys)

        logger.debug(
            "Fetched %d commitments and %d disbursements for %s",
            len(commitments),
            len(disbursements),
            project_id or "all projects",
        )
        return FundingSnapshot(projects=projects, commitments=commitments, disbursements=disbursements)

    def source_transactions(self, source: FundingSource) -> list[SourceTransaction]:
        """Disbursements drawn against a source's funder, newest first."""
        key = FunderKey(source.funder_type, source.funder_id)
        with store_access(f"read transactions for {source.name}"):
            records = self.store.list_disbursements([key])
            transactions = [self._to_transaction(r) for r in records]

        # Undated payments sort last
        dated = [t for t in transactions if t.payment_date is not None]
        undated = [t for t in transactions if t.payment_date is None]
        return sorted(dated, key=lambda t: t.payment_date, reverse=True) + undated

    def project_funders(self, project_id: str) -> ProjectFunders:
        """Investors and banks that fund a project, first occurrence order."""
        funders = ProjectFunders()
        seen: set[FunderKey] = set()
        with store_access(f"read funders for {project_id}"):
            commitments = self.store.list_commitments(project_id)
        for commitment in commitments:
            key = commitment.funder_key
            if key in seen:
                continue
            seen.add(key)
            if key.funder_type == FunderType.INVESTOR:
                funders.investors.append(Investor(key.funder_id, commitment.funder_name))
            else:
                funders.banks.append(Bank(key.funder_id, commitment.funder_name))
        return funders

    def default_attribution(self, subcontractor_id: str) -> FunderKey | None:
        """The funder configured to finance a subcontractor, if any."""
        with store_access(f"read subcontractor {subcontractor_id}"):
            return self.store.get_subcontractor(subcontractor_id).financed_by

    def already_paid(self, subcontractor_id: str) -> Decimal:
        """Total wired to a subcontractor across all contracts."""
        with store_access(f"read payments to {subcontractor_id}"):
            records = self.store.list_subcontractor_disbursements(subcontractor_id)
        return sum((r.amount for r in records), Decimal("0"))

    def _to_transaction(self, record: DisbursementRecord) -> SourceTransaction:
        subcontractor = self.store.subcontractors.get(record.subcontractor_id)
        contract = self.store.contracts.get(record.contract_id) if record.contract_id else None
        milestone = self.store.milestones.get(record.milestone_id) if record.milestone_id else None
        return SourceTransaction(
            disbursement_id=record.disbursement_id,
            payment_date=record.payment_date,
            amount=record.amount,
            subcontractor=subcontractor.name if subcontractor else "Unknown",
            contract=contract.contract_number if contract else "N/A",
            notes=record.notes,
            milestone=milestone.milestone_name if milestone else None,
        )
