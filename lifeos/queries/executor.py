"""
Transaction Query Engine

DESIGN DECISION: Query execution is DETERMINISTIC.
A TransactionQuery describes which transactions to look at; this engine
filters and totals the actual stored transactions. Nothing is estimated:
an empty selection totals to zero.

The engine works on a snapshot (a tuple of transactions taken from the
root), so it never observes a half-applied mutation.
"""

from datetime import date
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lifeos.models.finance import (
    MasterCategory,
    Necessity,
    Transaction,
    TransactionType,
)


class TransactionQuery(BaseModel):
    """
    Filters over the transaction history.

    Every filter is optional; an empty query selects everything.
    month filters by calendar month and requires year.
    """

    model_config = ConfigDict(frozen=True)

    type: Optional[TransactionType] = None
    master_category: Optional[MasterCategory] = None
    necessity: Optional[Necessity] = None
    category: Optional[str] = None

    year: Optional[int] = Field(default=None, ge=1900, le=9999)
    month: Optional[int] = Field(default=None, ge=1, le=12)
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @model_validator(mode='after')
    def validate_period(self) -> 'TransactionQuery':
        if self.month is not None and self.year is None:
            raise ValueError("month filter requires a year")
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self

    @classmethod
    def for_month(cls, year: int, month: int, **filters) -> 'TransactionQuery':
        return cls(year=year, month=month, **filters)

    def matches(self, transaction: Transaction) -> bool:
        if self.type is not None and transaction.type != self.type:
            return False
        if self.master_category is not None and transaction.master_category != self.master_category:
            return False
        if self.necessity is not None and transaction.necessity != self.necessity:
            return False
        if self.category is not None and transaction.category != self.category:
            return False

        day = transaction.date.date()
        if self.year is not None and day.year != self.year:
            return False
        if self.month is not None and day.month != self.month:
            return False
        if self.date_from is not None and day < self.date_from:
            return False
        if self.date_to is not None and day > self.date_to:
            return False
        return True


class CashFlowSummary(BaseModel):
    """Income against the four spending buckets for one selection."""

    model_config = ConfigDict(frozen=True)

    income: float
    expenses_by_bucket: dict[MasterCategory, float]
    total_expense: float
    cash_left: float
    consumption_needs: float
    consumption_wants: float


class TransactionQueryExecutor:
    """
    Executes transaction queries against a snapshot.

    GUARANTEES:
    - Only totals real transactions
    - Order of results follows the stored order (newest first)
    """

    def __init__(self, transactions: Iterable[Transaction]):
        self._transactions = tuple(transactions)

    def filter(self, query: Optional[TransactionQuery] = None) -> tuple[Transaction, ...]:
        if query is None:
            return self._transactions
        return tuple(t for t in self._transactions if query.matches(t))

    def total(self, query: Optional[TransactionQuery] = None) -> float:
        return sum(t.amount for t in self.filter(query))

    def by_master_category(
        self,
        query: Optional[TransactionQuery] = None,
    ) -> dict[MasterCategory, float]:
        """Expense totals for each of the four buckets (all four always present)."""
        totals = {bucket: 0.0 for bucket in MasterCategory}
        for t in self.filter(query):
            if t.type == TransactionType.EXPENSE and t.master_category is not None:
                totals[t.master_category] += t.amount
        return totals

    def need_vs_want(self, query: Optional[TransactionQuery] = None) -> dict[Necessity, float]:
        """
        Consumption spending split into needs and wants.

        Consumption expenses not tagged as a need count as wants.
        """
        needs = wants = 0.0
        for t in self.filter(query):
            if t.type != TransactionType.EXPENSE or t.master_category != MasterCategory.CONSUMPTION:
                continue
            if t.necessity == Necessity.NEED:
                needs += t.amount
            else:
                wants += t.amount
        return {Necessity.NEED: needs, Necessity.WANT: wants}

    def monthly_totals(
        self,
        query: Optional[TransactionQuery] = None,
    ) -> dict[str, dict[TransactionType, float]]:
        """Income and expense per 'YYYY-MM', oldest month first."""
        totals: dict[str, dict[TransactionType, float]] = {}
        for t in self.filter(query):
            key = t.date.strftime("%Y-%m")
            bucket = totals.setdefault(
                key, {TransactionType.INCOME: 0.0, TransactionType.EXPENSE: 0.0}
            )
            bucket[t.type] += t.amount
        return dict(sorted(totals.items()))

    def cash_flow(self, query: Optional[TransactionQuery] = None) -> CashFlowSummary:
        selected = TransactionQueryExecutor(self.filter(query))

        income = selected.total(TransactionQuery(type=TransactionType.INCOME))
        buckets = selected.by_master_category()
        split = selected.need_vs_want()
        total_expense = sum(buckets.values())

        return CashFlowSummary(
            income=income,
            expenses_by_bucket=buckets,
            total_expense=total_expense,
            cash_left=income - total_expense,
            consumption_needs=split[Necessity.NEED],
            consumption_wants=split[Necessity.WANT],
        )
