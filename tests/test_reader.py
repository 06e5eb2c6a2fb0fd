"""Tests for FundingLedgerReader."""

from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest

from funding_engine.exceptions import DataAccessError, EntityNotFoundError
from funding_engine.funding.evaluator import evaluate_source
from funding_engine.funding.reader import FundingLedgerReader
from funding_engine.models.funding import FunderKey
from funding_engine.store.ledger import LedgerStore


@pytest.fixture
def reader(store: LedgerStore) -> FundingLedgerReader:
    return FundingLedgerReader(store)


class TestSnapshot:
    """Tests for snapshot."""

    def test_all_projects(self, reader: FundingLedgerReader) -> None:
        snapshot = reader.snapshot()

        assert [p.project_id for p in snapshot.projects] == ["proj-001", "proj-002"]
        assert len(snapshot.commitments) == 2
        assert len(snapshot.disbursements) == 1

    def test_single_project(self, reader: FundingLedgerReader) -> None:
        snapshot = reader.snapshot("proj-002")

        assert [p.project_id for p in snapshot.projects] == ["proj-002"]
        assert snapshot.commitments == []
        assert snapshot.disbursements == []

    def test_unknown_project(self, reader: FundingLedgerReader) -> None:
        assert reader.snapshot("proj-404").projects == []

    def test_store_failure_wrapped(self, reader: FundingLedgerReader) -> None:
        with patch.object(LedgerStore, "list_commitments", side_effect=RuntimeError("disk gone")):
            with pytest.raises(DataAccessError, match="disk gone"):
                reader.snapshot()


class TestSourceTransactions:
    """Tests for source_transactions."""

    def test_newest_first_with_display_fields(
        self, store: LedgerStore, reader: FundingLedgerReader, investor_key: FunderKey, today: date
    ) -> None:
        store.create_wire_payment("sub-001", "ms-001", Decimal("20000"), date(2025, 6, 10), None, investor_key)
        commitment = store.list_commitments("proj-001")[0]
        source = evaluate_source(commitment, store.list_disbursements([investor_key]), today)

        transactions = reader.source_transactions(source)

        assert [t.payment_date for t in transactions] == [date(2025, 6, 10), date(2025, 5, 2)]
        assert transactions[0].subcontractor == "Acme Builders"
        assert transactions[0].contract == "CTR-1001"
        assert transactions[0].milestone == "Foundation"

    def test_undated_last(
        self, store: LedgerStore, reader: FundingLedgerReader, investor_key: FunderKey, today: date
    ) -> None:
        store.create_wire_payment("sub-001", None, Decimal("5"), None, "advance", investor_key)
        source = evaluate_source(store.list_commitments("proj-001")[0], [], today)

        transactions = reader.source_transactions(source)

        assert transactions[-1].payment_date is None
        assert transactions[-1].contract == "N/A"
        assert transactions[-1].milestone is None


class TestAttribution:
    """Tests for project_funders, default_attribution and already_paid."""

    def test_project_funders(self, reader: FundingLedgerReader) -> None:
        funders = reader.project_funders("proj-001")

        assert [i.name for i in funders.investors] == ["Alice Capital"]
        assert [b.name for b in funders.banks] == ["First Bank"]

    def test_project_funders_empty(self, reader: FundingLedgerReader) -> None:
        funders = reader.project_funders("proj-002")

        assert funders.investors == []
        assert funders.banks == []

    def test_default_attribution(self, reader: FundingLedgerReader, investor_key: FunderKey) -> None:
        assert reader.default_attribution("sub-001") == investor_key

    def test_default_attribution_unknown_subcontractor(self, reader: FundingLedgerReader) -> None:
        with pytest.raises(EntityNotFoundError):
            reader.default_attribution("sub-404")

    def test_already_paid(self, store: LedgerStore, reader: FundingLedgerReader) -> None:
        store.create_wire_payment("sub-001", None, Decimal("500"), date(2025, 6, 1), None)

        assert reader.already_paid("sub-001") == Decimal("30500")

    @pytest.mark.parametrize(
        "method, call",
        [
            ("list_commitments", lambda r: r.project_funders("proj-001")),
            ("get_subcontractor", lambda r: r.default_attribution("sub-001")),
            ("list_subcontractor_disbursements", lambda r: r.already_paid("sub-001")),
        ],
    )
    def test_store_failure_wrapped(self, reader: FundingLedgerReader, method: str, call) -> None:
        with patch.object(LedgerStore, method, side_effect=RuntimeError("db down")):
            with pytest.raises(DataAccessError, match="db down"):
                call(reader)
