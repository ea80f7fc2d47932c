"""Data models for statement transactions, categories and aggregates."""

from statement_exporter.models.category import Category
from statement_exporter.models.report import AggregateResult, CategoryGroup
from statement_exporter.models.transaction import (
    Transaction,
    TransactionSource,
    TransactionType,
)

__all__ = [
    "Transaction",
    "TransactionSource",
    "TransactionType",
    "Category",
    "AggregateResult",
    "CategoryGroup",
]
