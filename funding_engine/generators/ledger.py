"""Sample funding ledger generator."""

from __future__ import annotations

import logging
import random
from datetime import date, timedelta
from decimal import Decimal

from funding_engine.generators.base import BaseGenerator
from funding_engine.models.enums import FunderType, RepaymentType
from funding_engine.models.funding import (
    Bank,
    BankCredit,
    FunderKey,
    Investor,
    Project,
    ProjectInvestment,
)
from funding_engine.models.schedule import MilestoneEntry, Subcontractor, SubcontractorContract
from funding_engine.notifications.schedule import calculate_rate_amount, generate_repayment_schedule
from funding_engine.store.ledger import LedgerStore

logger = logging.getLogger(__name__)


class LedgerGenerator(BaseGenerator):
    """Populate a ledger store with projects, funding and schedules."""

    CREDIT_TYPES = ["construction_loan", "term_loan", "line_of_credit"]

    # Milestone splits, in percent of contract value
    MILESTONE_PLANS = [
        [Decimal("30"), Decimal("40"), Decimal("30")],
        [Decimal("20"), Decimal("30"), Decimal("30"), Decimal("20")],
        [Decimal("50"), Decimal("50")],
    ]

    def __init__(self, seed: int | None = None, today: date | None = None) -> None:
        super().__init__(seed)
        self.today = today or date.today()

    def generate(
        self,
        num_projects: int = 3,
        num_investors: int = 4,
        num_banks: int = 2,
        subcontractors_per_project: int = 2,
    ) -> LedgerStore:
        """Generate a complete ledger.

        Parameters
        ----------
        num_projects : int
            Number of projects.
        num_investors : int
            Investors shared across projects.
        num_banks : int
            Banks shared across projects.
        subcontractors_per_project : int
            Subcontractors (one contract each) per project.

        Returns
        -------
        LedgerStore
            Populated store.
        """
        store = LedgerStore()

        investors = [Investor(self.fake.uuid4(), self.fake.name()) for _ in range(num_investors)]
        banks = [Bank(self.fake.uuid4(), f"{self.fake.last_name()} Bank") for _ in range(num_banks)]
        for investor in investors:
            store.add_investor(investor)
        for bank in banks:
            store.add_bank(bank)

        for _ in range(num_projects):
            project = self._generate_project()
            store.add_project(project)

            funders: list[FunderKey] = []
            for investor in random.sample(investors, k=min(2, len(investors))):
                store.add_investment(self._generate_investment(project, investor))
                funders.append(FunderKey(FunderType.INVESTOR, investor.investor_id))

            if banks:
                bank = random.choice(banks)
                credit = self._generate_credit(project, bank)
                store.add_credit(credit)
                for entry in generate_repayment_schedule(credit):
                    store.add_schedule_entry(entry)
                funders.append(FunderKey(FunderType.BANK, bank.bank_id))

            for _ in range(subcontractors_per_project):
                self._generate_subcontract(store, project, funders)

        logger.info("Generated ledger: %s", store.summary())
        return store

    def _generate_project(self) -> Project:
        return Project(
            project_id=self.fake.uuid4(),
            name=f"{self.fake.city()} Residences",
            start_date=self.today - timedelta(days=random.randint(60, 720)),
        )

    def _generate_investment(self, project: Project, investor: Investor) -> ProjectInvestment:
        expiration = None
        if random.random() < 0.6:
            expiration = self.today + timedelta(days=random.randint(-30, 365))

        return ProjectInvestment(
            investment_id=self.fake.uuid4(),
            project_id=project.project_id,
            investor_id=investor.investor_id,
            amount=Decimal(random.randint(100, 500) * 1000),
            investment_date=project.start_date,
            usage_expiration_date=expiration,
            grace_period_days=random.choice([0, 90, 180]),
            maturity_date=project.start_date + timedelta(days=365 * random.randint(2, 5)),
            expected_return=Decimal(str(round(random.uniform(6, 12), 2))),
        )

    def _generate_credit(self, project: Project, bank: Bank) -> BankCredit:
        amount = Decimal(random.randint(500, 3000) * 1000)
        credit = BankCredit(
            credit_id=self.fake.uuid4(),
            bank_id=bank.bank_id,
            project_id=project.project_id,
            credit_type=random.choice(self.CREDIT_TYPES),
            amount=amount,
            outstanding_balance=amount,
            interest_rate=Decimal(str(round(random.uniform(3, 6), 2))),
            start_date=project.start_date,
            maturity_date=project.start_date + timedelta(days=365 * random.randint(3, 8)),
            usage_expiration_date=project.start_date + timedelta(days=random.randint(365, 1095)),
            grace_period_days=random.choice([0, 180, 365]),
            repayment_type=random.choice(list(RepaymentType)),
        )
        credit.rate_amount = calculate_rate_amount(credit)
        return credit

    def _generate_subcontract(
        self,
        store: LedgerStore,
        project: Project,
        funders: list[FunderKey],
    ) -> None:
        financed_by = random.choice(funders) if funders and random.random() < 0.7 else None
        subcontractor = Subcontractor(
            subcontractor_id=self.fake.uuid4(),
            name=self.fake.company(),
            financed_by=financed_by,
        )
        store.add_subcontractor(subcontractor)

        contract = SubcontractorContract(
            contract_id=self.fake.uuid4(),
            subcontractor_id=subcontractor.subcontractor_id,
            project_id=project.project_id,
            contract_value=Decimal(random.randint(50, 400) * 1000),
            contract_number=f"CTR-{random.randint(1000, 9999)}",
        )
        store.add_contract(contract)

        due = self.today - timedelta(days=random.randint(0, 90))
        for i, percentage in enumerate(random.choice(self.MILESTONE_PLANS), start=1):
            milestone = MilestoneEntry(
                milestone_id=self.fake.uuid4(),
                contract_id=contract.contract_id,
                milestone_name=f"Phase {i}",
                percentage=percentage,
                due_date=due,
            )
            store.add_milestone(milestone)

            # Past milestones are usually settled already
            if due < self.today and random.random() < 0.6:
                amount = contract.contract_value * percentage / 100
                store.record_subcontractor_payment(
                    subcontractor.subcontractor_id,
                    milestone.milestone_id,
                    amount,
                    due,
                    f"{milestone.milestone_name} payment",
                    paid_by=financed_by or (random.choice(funders) if funders else None),
                )

            due = due + timedelta(days=random.randint(20, 120))
