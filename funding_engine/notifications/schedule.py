"""Bank credit repayment schedule generation."""

from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Iterator

from dateutil.relativedelta import relativedelta

from funding_engine.models.enums import NotificationType, RepaymentType
from funding_engine.models.funding import BankCredit
from funding_engine.models.schedule import BankScheduleEntry
from funding_engine.store.ledger import LedgerStore

logger = logging.getLogger(__name__)

DEFAULT_MATURITY_YEARS = 10.0
MIN_REPAYMENT_YEARS = 0.1


def repayment_years(credit: BankCredit) -> float:
    """Years left for repayment once the grace period is taken out."""
    maturity_years = DEFAULT_MATURITY_YEARS
    if credit.maturity_date is not None:
        maturity_years = (credit.maturity_date - credit.start_date).days / 365.25
    grace_years = credit.grace_period_days / 365
    return max(MIN_REPAYMENT_YEARS, maturity_years - grace_years)


def _periods_per_year(credit: BankCredit) -> int:
    return 1 if credit.repayment_type == RepaymentType.YEARLY else 12


def calculate_rate_amount(credit: BankCredit) -> Decimal:
    """Periodic annuity installment for a credit.

    Monthly credits use the annual rate divided by twelve; yearly credits use
    it as is. Without interest the principal is split evenly.
    """
    principal = float(credit.amount)
    annual_rate = float(credit.interest_rate) / 100
    per_year = _periods_per_year(credit)
    n = repayment_years(credit) * per_year

    if annual_rate == 0:
        payment = principal / n
    else:
        r = annual_rate / per_year
        payment = principal * r * (1 + r) ** n / ((1 + r) ** n - 1)

    return Decimal(str(round(payment, 2)))


def installment_count(credit: BankCredit) -> int:
    return max(1, round(repayment_years(credit) * _periods_per_year(credit)))


def _notification_type(number: int, count: int) -> NotificationType:
    if number == 1:
        return NotificationType.FIRST_PAYMENT
    if number == count:
        return NotificationType.FINAL_PAYMENT
    return NotificationType.RECURRING


def _generate_entries(credit: BankCredit) -> Iterator[BankScheduleEntry]:
    count = installment_count(credit)
    amount = credit.rate_amount if credit.rate_amount > 0 else calculate_rate_amount(credit)
    base_date = credit.start_date + timedelta(days=credit.grace_period_days)

    for i in range(1, count + 1):
        if credit.repayment_type == RepaymentType.YEARLY:
            due_date = base_date + relativedelta(years=i)
        else:
            due_date = base_date + relativedelta(months=i)

        yield BankScheduleEntry(
            entry_id=f"{credit.credit_id}-{i:03d}",
            credit_id=credit.credit_id,
            payment_number=i,
            due_date=due_date,
            amount=amount,
            notification_type=_notification_type(i, count),
        )


def generate_repayment_schedule(credit: BankCredit) -> list[BankScheduleEntry]:
    """Installments for a credit, first due one period after the grace period.

    Entry ids derive from the credit id and installment number, so generating
    twice yields the same rows.
    """
    return list(_generate_entries(credit))


def regenerate_schedule(store: LedgerStore, credit_id: str) -> int:
    """Rebuild a credit's installments, keeping completed and dismissed ones."""
    credit = store.get_credit(credit_id)
    entries = generate_repayment_schedule(credit)
    written = store.replace_schedule(credit_id, entries)
    logger.info("Regenerated schedule for credit %s: %d installments written", credit_id, written)
    return written
