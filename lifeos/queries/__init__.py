"""Deterministic queries over the transaction history."""

from lifeos.queries.executor import (
    CashFlowSummary,
    TransactionQuery,
    TransactionQueryExecutor,
)

__all__ = [
    "CashFlowSummary",
    "TransactionQuery",
    "TransactionQueryExecutor",
]
