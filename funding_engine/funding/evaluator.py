"""Funding source evaluation: spent/available amounts and status.

Status is a pure classification re-evaluated from current data on every
call; nothing here is persisted. Precedence, first match wins:

1. available <= 0                      -> depleted
2. usage expiration strictly past      -> expired
3. expiration within the warning window -> expiring_soon
4. otherwise                           -> active

A high-utilization warning is layered on top of ``active`` sources only and
never changes the status.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from funding_engine.config import FundingThresholds
from funding_engine.models.enums import FunderType, FundingStatus
from funding_engine.models.funding import (
    DisbursementRecord,
    FunderKey,
    FundingCommitment,
    FundingSource,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def compute_utilization(spent: Decimal, total: Decimal) -> Decimal:
    """Spent as a percentage of total; 0 when nothing is committed."""
    if total == 0:
        return ZERO
    return spent / total * HUNDRED


def format_percent(value: Decimal) -> str:
    return str(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def classify_status(
    available: Decimal,
    usage_expiration_date: date | None,
    today: date,
    expiring_soon_days: int = 30,
) -> FundingStatus:
    """Classify a funding source; see the module docstring for precedence."""
    if available <= 0:
        return FundingStatus.DEPLETED
    if usage_expiration_date is not None:
        if usage_expiration_date < today:
            return FundingStatus.EXPIRED
        if (usage_expiration_date - today).days <= expiring_soon_days:
            return FundingStatus.EXPIRING_SOON
    return FundingStatus.ACTIVE


def source_warnings(
    name: str,
    funder_type: FunderType,
    status: FundingStatus,
    utilization: Decimal,
    days_until_expiration: int | None,
    utilization_warning_pct: Decimal = Decimal("80"),
) -> list[str]:
    """Operator-facing warnings for one source."""
    warnings: list[str] = []
    if status == FundingStatus.DEPLETED:
        if funder_type == FunderType.BANK:
            warnings.append(f"{name}: Credit fully utilized")
        else:
            warnings.append(f"{name}: Funds fully depleted")
    elif status == FundingStatus.EXPIRED:
        warnings.append(f"{name}: Usage period expired")
    elif status == FundingStatus.EXPIRING_SOON:
        warnings.append(f"{name}: Expires in {days_until_expiration} days")

    if status == FundingStatus.ACTIVE and utilization >= utilization_warning_pct:
        warnings.append(f"{name}: {format_percent(utilization)}% utilized")
    return warnings


def evaluate_source(
    commitment: FundingCommitment,
    disbursements: Iterable[DisbursementRecord],
    today: date,
    thresholds: FundingThresholds | None = None,
) -> FundingSource:
    """Evaluate one commitment against the disbursements of its funder.

    Spending is attributed by funder, not by commitment row: every
    disbursement paid by this commitment's investor or bank counts against
    it. Disbursements belonging to other funders are ignored.
    """
    thresholds = thresholds or FundingThresholds()
    key = commitment.funder_key

    spent = sum((d.amount for d in disbursements if d.funder_key == key), ZERO)
    total = commitment.amount
    available = total - spent
    utilization = compute_utilization(spent, total)
    status = classify_status(
        available, commitment.usage_expiration_date, today, thresholds.expiring_soon_days
    )
    days_until = (
        (commitment.usage_expiration_date - today).days
        if commitment.usage_expiration_date is not None
        else None
    )

    return FundingSource(
        commitment_id=commitment.commitment_id,
        funder_type=commitment.funder_type,
        funder_id=commitment.funder_id,
        name=commitment.funder_name,
        total_amount=total,
        spent_amount=spent,
        available_amount=available,
        utilization=utilization,
        status=status,
        project_id=commitment.project_id,
        usage_expiration_date=commitment.usage_expiration_date,
        grace_period_days=commitment.grace_period_days,
        commitment_date=commitment.commitment_date,
        maturity_date=commitment.maturity_date,
        rate=commitment.rate,
        warnings=source_warnings(
            commitment.funder_name,
            commitment.funder_type,
            status,
            utilization,
            days_until,
            thresholds.utilization_warning_pct,
        ),
    )


def evaluate_sources(
    commitments: Iterable[FundingCommitment],
    disbursements: Iterable[DisbursementRecord],
    today: date,
    thresholds: FundingThresholds | None = None,
) -> list[FundingSource]:
    """Evaluate many commitments, preserving their order."""
    by_funder: dict[FunderKey, list[DisbursementRecord]] = defaultdict(list)
    for record in disbursements:
        key = record.funder_key
        if key is not None:
            by_funder[key].append(record)

    return [
        evaluate_source(c, by_funder.get(c.funder_key, []), today, thresholds)
        for c in commitments
    ]
