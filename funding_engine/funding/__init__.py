"""Funding source evaluation and project aggregation."""

from funding_engine.funding.aggregator import (
    build_overview,
    rollup,
    summarize_project,
    summarize_projects,
)
from funding_engine.funding.evaluator import (
    classify_status,
    compute_utilization,
    evaluate_source,
    evaluate_sources,
)
from funding_engine.funding.reader import FundingLedgerReader, FundingSnapshot, ProjectFunders

__all__ = [
    "FundingLedgerReader",
    "FundingSnapshot",
    "ProjectFunders",
    "build_overview",
    "classify_status",
    "compute_utilization",
    "evaluate_source",
    "evaluate_sources",
    "rollup",
    "summarize_project",
    "summarize_projects",
]
