"""Tests for transaction aggregation by category."""

from datetime import datetime
from decimal import Decimal

import pytest

from statement_exporter.errors import EmptyInputError
from statement_exporter.models.category import Category
from statement_exporter.models.transaction import Transaction, TransactionType
from statement_exporter.processing.aggregator import aggregate

FOOD = Category(id="cat-food", name="Food")
SALARY = Category(id="cat-salary", name="Salary")
TRAVEL = Category(id="cat-travel", name="Travel")


def create_transaction(
    amount: str,
    transaction_type: TransactionType = TransactionType.EXPENSE,
    category_user: Category | None = None,
    category_ai: Category | None = None,
    occurred_at: datetime = datetime(2024, 1, 15, 10, 0),
    txn_id: str = "t1",
) -> Transaction:
    """Helper to create a Transaction for testing."""
    return Transaction(
        id=txn_id,
        amount=Decimal(amount),
        transaction_type=transaction_type,
        occurred_at=occurred_at,
        category_user=category_user,
        category_ai=category_ai,
    )


class TestAggregate:
    """Tests for aggregate function."""

    def test_empty_input_raises(self) -> None:
        """Test that an empty list is rejected before any grouping."""
        with pytest.raises(EmptyInputError):
            aggregate([])

    def test_scenario_food_and_salary(self) -> None:
        """Two Food expenses and one Salary income produce two groups."""
        transactions = [
            create_transaction("100", category_user=FOOD, txn_id="a"),
            create_transaction("50", category_user=FOOD, txn_id="b"),
            create_transaction(
                "1000", TransactionType.INCOME, category_user=SALARY, txn_id="c"
            ),
        ]

        result = aggregate(transactions)

        assert list(result.groups) == ["cat-food", "cat-salary"]
        assert result.category_count == 2
        assert result.totals_by_category["cat-food"] == Decimal("-150")
        assert result.totals_by_category["cat-salary"] == Decimal("1000")

    def test_every_transaction_in_exactly_one_group(self) -> None:
        """Group sizes add up to the input and no transaction repeats."""
        transactions = [
            create_transaction("10", category_user=FOOD, txn_id="1"),
            create_transaction("20", category_ai=TRAVEL, txn_id="2"),
            create_transaction("30", txn_id="3"),
            create_transaction("40", category_user=FOOD, txn_id="4"),
            create_transaction("50", TransactionType.INCOME, category_user=SALARY, txn_id="5"),
        ]

        result = aggregate(transactions)

        grouped_ids = [t.id for group in result.groups.values() for t in group]
        assert sorted(grouped_ids) == ["1", "2", "3", "4", "5"]
        assert result.transaction_count == len(transactions)

    def test_expense_sign_ignores_stored_sign(self) -> None:
        """Expenses count negative whether stored as +25 or -25."""
        transactions = [
            create_transaction("25", category_user=FOOD, txn_id="1"),
            create_transaction("-25", category_user=FOOD, txn_id="2"),
        ]

        result = aggregate(transactions)

        assert result.totals_by_category["cat-food"] == Decimal("-50")

    def test_income_sign_ignores_stored_sign(self) -> None:
        """Income counts positive even when stored negative."""
        transactions = [
            create_transaction("-300", TransactionType.INCOME, category_user=SALARY, txn_id="1"),
            create_transaction("200", TransactionType.INCOME, category_user=SALARY, txn_id="2"),
        ]

        result = aggregate(transactions)

        assert result.totals_by_category["cat-salary"] == Decimal("500")

    def test_mixed_types_in_one_category(self) -> None:
        """A refund recorded as income offsets expenses in the same category."""
        transactions = [
            create_transaction("80", category_user=FOOD, txn_id="1"),
            create_transaction("30", TransactionType.INCOME, category_user=FOOD, txn_id="2"),
        ]

        result = aggregate(transactions)

        assert result.totals_by_category["cat-food"] == Decimal("-50")

    def test_uncategorized_key(self) -> None:
        """Transactions without user or AI category group under 'uncategorized'."""
        result = aggregate([create_transaction("12.50")])

        assert list(result.groups) == ["uncategorized"]
        group = next(result.iter_groups())
        assert group.name == "Uncategorized"
        assert group.total == Decimal("-12.50")

    def test_user_category_wins_over_ai(self) -> None:
        """The user override takes precedence over the AI suggestion."""
        result = aggregate(
            [create_transaction("5", category_user=TRAVEL, category_ai=FOOD)]
        )

        assert list(result.groups) == ["cat-travel"]

    def test_ai_category_used_when_no_user_category(self) -> None:
        """The AI category is used when the user has not chosen one."""
        result = aggregate([create_transaction("5", category_ai=FOOD)])

        assert list(result.groups) == ["cat-food"]

    def test_group_order_is_first_encounter(self) -> None:
        """Groups iterate in the order their first transaction appears."""
        transactions = [
            create_transaction("1", category_user=TRAVEL, txn_id="1"),
            create_transaction("1", category_user=FOOD, txn_id="2"),
            create_transaction("1", txn_id="3"),
            create_transaction("1", category_user=TRAVEL, txn_id="4"),
        ]

        result = aggregate(transactions)

        assert [g.key for g in result.iter_groups()] == [
            "cat-travel",
            "cat-food",
            "uncategorized",
        ]
