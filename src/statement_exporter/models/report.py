"""Aggregation result models shared by the builder and the CLI."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from decimal import Decimal

from statement_exporter.models.category import UNCATEGORIZED_NAME
from statement_exporter.models.transaction import Transaction


@dataclass
class CategoryGroup:
    """One category's slice of a statement.

    Attributes:
        key: Grouping key (category id or "uncategorized").
        name: Display name taken from the first transaction in the group.
        transactions: Transactions in input order.
        total: Sign-normalized total (expenses negative, income positive).
    """

    key: str
    name: str
    transactions: list[Transaction]
    total: Decimal

    @property
    def count(self) -> int:
        return len(self.transactions)


@dataclass
class AggregateResult:
    """Transactions grouped by effective category.

    Both dicts iterate in order of first encounter in the input.

    Attributes:
        groups: Transactions per category key.
        totals_by_category: Sign-normalized total per category key.
    """

    groups: dict[str, list[Transaction]] = field(default_factory=dict)
    totals_by_category: dict[str, Decimal] = field(default_factory=dict)

    @property
    def category_count(self) -> int:
        """Number of distinct category groups."""
        return len(self.groups)

    @property
    def transaction_count(self) -> int:
        """Number of transactions across all groups."""
        return sum(len(txns) for txns in self.groups.values())

    def iter_groups(self) -> Iterator[CategoryGroup]:
        """Yield one CategoryGroup per key, in group order."""
        for key, transactions in self.groups.items():
            name = transactions[0].category_name if transactions else UNCATEGORIZED_NAME
            yield CategoryGroup(
                key=key,
                name=name,
                transactions=transactions,
                total=self.totals_by_category.get(key, Decimal("0")),
            )
