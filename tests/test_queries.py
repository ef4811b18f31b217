"""
Tests for transaction queries.
"""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from lifeos.models import MasterCategory, Necessity, Transaction, TransactionType
from lifeos.queries import TransactionQuery, TransactionQueryExecutor


def _tx(tx_id, amount, tx_type, when, **fields):
    return Transaction(
        id=tx_id,
        amount=amount,
        description=f"Entry {tx_id}",
        type=tx_type,
        date=datetime(*when, tzinfo=timezone.utc),
        **fields,
    )


@pytest.fixture
def executor():
    return TransactionQueryExecutor([
        _tx("1", 5_000, TransactionType.INCOME, (2024, 3, 1), category="Salary"),
        _tx("2", 150, TransactionType.EXPENSE, (2024, 3, 2), category="Food",
            master_category=MasterCategory.CONSUMPTION, necessity=Necessity.NEED),
        _tx("3", 80, TransactionType.EXPENSE, (2024, 3, 9), category="Movies",
            master_category=MasterCategory.CONSUMPTION, necessity=Necessity.WANT),
        _tx("4", 350, TransactionType.EXPENSE, (2024, 3, 10), category="EMI",
            master_category=MasterCategory.COMMITMENT),
        _tx("5", 200, TransactionType.EXPENSE, (2023, 3, 12), category="Food",
            master_category=MasterCategory.CONSUMPTION),
        _tx("6", 5_000, TransactionType.INCOME, (2024, 4, 1), category="Salary"),
    ])


class TestTransactionQuery:
    """Tests for query construction."""

    def test_month_requires_year(self):
        with pytest.raises(ValidationError, match="month filter requires a year"):
            TransactionQuery(month=3)

    def test_date_range_must_be_ordered(self):
        with pytest.raises(ValidationError):
            TransactionQuery(date_from=date(2024, 3, 10), date_to=date(2024, 3, 1))


class TestTransactionQueryExecutor:
    """Tests for deterministic query execution."""

    def test_empty_query_selects_everything(self, executor):
        assert len(executor.filter()) == 6

    def test_month_filter_matches_year_too(self, executor):
        """Test that March 2023 is not part of March 2024."""
        query = TransactionQuery.for_month(2024, 3, type=TransactionType.EXPENSE)
        assert executor.total(query) == 150 + 80 + 350

    def test_date_range(self, executor):
        query = TransactionQuery(date_from=date(2024, 3, 2), date_to=date(2024, 3, 9))
        assert [t.id for t in executor.filter(query)] == ["2", "3"]

    def test_by_master_category_has_all_buckets(self, executor):
        totals = executor.by_master_category(TransactionQuery.for_month(2024, 3))
        assert totals == {
            MasterCategory.CONSUMPTION: 230,
            MasterCategory.COMMITMENT: 350,
            MasterCategory.SAFETY: 0,
            MasterCategory.GROWTH: 0,
        }

    def test_need_vs_want(self, executor):
        """Test that untagged consumption counts as a want."""
        split = executor.need_vs_want()
        assert split[Necessity.NEED] == 150
        assert split[Necessity.WANT] == 80 + 200

    def test_monthly_totals(self, executor):
        totals = executor.monthly_totals()
        assert list(totals) == ["2023-03", "2024-03", "2024-04"]
        assert totals["2024-03"][TransactionType.INCOME] == 5_000
        assert totals["2024-03"][TransactionType.EXPENSE] == 580

    def test_cash_flow(self, executor):
        flow = executor.cash_flow(TransactionQuery.for_month(2024, 3))
        assert flow.income == 5_000
        assert flow.total_expense == 580
        assert flow.cash_left == 4_420
        assert flow.consumption_needs == 150
        assert flow.consumption_wants == 80
