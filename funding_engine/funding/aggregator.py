"""Project funding aggregation and portfolio rollup."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable

from funding_engine.config import FundingThresholds
from funding_engine.funding.evaluator import compute_utilization, evaluate_sources
from funding_engine.funding.reader import FundingLedgerReader
from funding_engine.models.funding import (
    FundingRollup,
    FundingSource,
    Project,
    ProjectFundingSummary,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def summarize_project(project: Project, sources: list[FundingSource]) -> ProjectFundingSummary:
    """Roll one project's sources into committed/spent/available totals."""
    total_committed = sum((s.total_amount for s in sources), ZERO)
    total_spent = sum((s.spent_amount for s in sources), ZERO)
    total_available = sum((s.available_amount for s in sources), ZERO)

    warnings: list[str] = []
    for source in sources:
        warnings.extend(source.warnings)

    return ProjectFundingSummary(
        project=project,
        total_committed=total_committed,
        total_spent=total_spent,
        total_available=total_available,
        utilization=compute_utilization(total_spent, total_committed),
        funding_sources=list(sources),
        warnings=warnings,
    )


def summarize_projects(
    projects: Iterable[Project],
    sources: Iterable[FundingSource],
) -> list[ProjectFundingSummary]:
    """Summaries for every project that has at least one funding source.

    Project order is preserved. Sources without a project (unassigned
    credits) are not reported under any project.
    """
    by_project: dict[str, list[FundingSource]] = {}
    for source in sources:
        if source.project_id is None:
            continue
        by_project.setdefault(source.project_id, []).append(source)

    return [
        summarize_project(project, by_project[project.project_id])
        for project in projects
        if by_project.get(project.project_id)
    ]


def rollup(summaries: Iterable[ProjectFundingSummary]) -> FundingRollup:
    """Sum project totals; utilization is recomputed, never averaged."""
    committed = spent = available = ZERO
    warning_count = project_count = 0
    for summary in summaries:
        committed += summary.total_committed
        spent += summary.total_spent
        available += summary.total_available
        warning_count += len(summary.warnings)
        project_count += 1

    return FundingRollup(
        total_committed=committed,
        total_spent=spent,
        total_available=available,
        utilization=compute_utilization(spent, committed),
        warning_count=warning_count,
        project_count=project_count,
    )


def build_overview(
    reader: FundingLedgerReader,
    today: date,
    project_id: str | None = None,
    thresholds: FundingThresholds | None = None,
) -> list[ProjectFundingSummary]:
    """Read the ledger and derive project summaries for one refresh cycle."""
    snapshot = reader.snapshot(project_id)
    sources = evaluate_sources(snapshot.commitments, snapshot.disbursements, today, thresholds)
    summaries = summarize_projects(snapshot.projects, sources)
    logger.info(
        "Funding overview: %d projects with funding, %d sources",
        len(summaries),
        len(sources),
    )
    return summaries
