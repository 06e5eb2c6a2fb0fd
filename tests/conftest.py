"""Pytest configuration and fixtures."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from funding_engine.models.enums import (
    FunderType,
    MilestoneStatus,
    NotificationType,
    ScheduleStatus,
)
from funding_engine.models.funding import (
    Bank,
    BankCredit,
    FunderKey,
    Investor,
    Project,
    ProjectInvestment,
)
from funding_engine.models.schedule import (
    BankScheduleEntry,
    MilestoneEntry,
    Subcontractor,
    SubcontractorContract,
)
from funding_engine.notifications.lifecycle import NotificationLifecycleManager
from funding_engine.store.ledger import LedgerStore

TODAY = date(2025, 6, 15)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def today() -> date:
    """Fixed reference date."""
    return TODAY


@pytest.fixture
def investor_key() -> FunderKey:
    return FunderKey(FunderType.INVESTOR, "inv-001")


@pytest.fixture
def bank_key() -> FunderKey:
    return FunderKey(FunderType.BANK, "bank-001")


@pytest.fixture
def sample_credit() -> BankCredit:
    """Five-year monthly credit starting at the beginning of 2025."""
    return BankCredit(
        credit_id="credit-001",
        bank_id="bank-001",
        project_id="proj-001",
        credit_type="construction_loan",
        amount=Decimal("500000"),
        outstanding_balance=Decimal("500000"),
        interest_rate=Decimal("4.5"),
        start_date=date(2025, 1, 1),
        maturity_date=date(2030, 1, 1),
        usage_expiration_date=date(2027, 1, 1),
    )


@pytest.fixture
def store(sample_credit: BankCredit, investor_key: FunderKey) -> LedgerStore:
    """Small ledger relative to TODAY (2025-06-15).

    - proj-001 funded by one investor (100k) and one bank credit (500k)
    - proj-002 has no commitments
    - four installments: 3 days overdue, due today, due in 30 days, completed
    - one subcontractor financed by the investor, contract worth 100k with a
      pending 20% milestone due in 5 days and a paid 30% milestone
    """
    s = LedgerStore()
    s.add_project(Project("proj-001", "Harbor View", date(2025, 1, 1)))
    s.add_project(Project("proj-002", "Empty Lot", date(2024, 6, 1)))
    s.add_investor(Investor("inv-001", "Alice Capital"))
    s.add_bank(Bank("bank-001", "First Bank"))

    s.add_investment(
        ProjectInvestment(
            investment_id="invest-001",
            project_id="proj-001",
            investor_id="inv-001",
            amount=Decimal("100000"),
            investment_date=date(2025, 1, 1),
            usage_expiration_date=date(2026, 1, 1),
        )
    )
    s.add_credit(sample_credit)

    installments = [
        ("credit-001-001", 1, date(2025, 6, 12), ScheduleStatus.PENDING, NotificationType.FIRST_PAYMENT),
        ("credit-001-002", 2, date(2025, 6, 15), ScheduleStatus.PENDING, NotificationType.RECURRING),
        ("credit-001-003", 3, date(2025, 7, 15), ScheduleStatus.PENDING, NotificationType.RECURRING),
        ("credit-001-004", 4, date(2025, 5, 15), ScheduleStatus.COMPLETED, NotificationType.RECURRING),
    ]
    for entry_id, number, due, status, kind in installments:
        s.add_schedule_entry(
            BankScheduleEntry(
                entry_id=entry_id,
                credit_id="credit-001",
                payment_number=number,
                due_date=due,
                amount=Decimal("9321.51"),
                notification_type=kind,
                status=status,
            )
        )

    s.add_subcontractor(Subcontractor("sub-001", "Acme Builders", financed_by=investor_key))
    s.add_contract(
        SubcontractorContract(
            contract_id="contract-001",
            subcontractor_id="sub-001",
            project_id="proj-001",
            contract_value=Decimal("100000"),
            contract_number="CTR-1001",
        )
    )
    s.add_milestone(
        MilestoneEntry(
            milestone_id="ms-001",
            contract_id="contract-001",
            milestone_name="Foundation",
            percentage=Decimal("20"),
            due_date=date(2025, 6, 20),
        )
    )
    s.add_milestone(
        MilestoneEntry(
            milestone_id="ms-002",
            contract_id="contract-001",
            milestone_name="Excavation",
            percentage=Decimal("30"),
            due_date=date(2025, 5, 1),
            status=MilestoneStatus.PAID,
            paid_date=date(2025, 5, 2),
        )
    )
    s.create_wire_payment(
        "sub-001", "ms-002", Decimal("30000"), date(2025, 5, 2), "Excavation payment", investor_key
    )
    return s


@pytest.fixture
def clock():
    """Clock frozen at 09:00 on TODAY."""
    return lambda: datetime(2025, 6, 15, 9, 0)


@pytest.fixture
def manager(store: LedgerStore, clock) -> NotificationLifecycleManager:
    return NotificationLifecycleManager(store, clock=clock)
