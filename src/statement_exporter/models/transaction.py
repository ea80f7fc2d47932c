"""Transaction data model for statement exports."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from statement_exporter.models.category import (
    UNCATEGORIZED_KEY,
    UNCATEGORIZED_NAME,
    Category,
)
from statement_exporter.utils.date_utils import parse_timestamp
from statement_exporter.utils.decimal_utils import to_decimal

# Currency shown when the record carries none
DEFAULT_CURRENCY = "INR"

# Description shown when neither raw description nor merchant is present
MISSING_DESCRIPTION = "N/A"


class TransactionType(Enum):
    """Direction of a transaction."""

    EXPENSE = "expense"  # Money out
    INCOME = "income"  # Money in
    TRANSFER = "transfer"  # Between own accounts


class TransactionSource(Enum):
    """Where the data layer got the transaction from."""

    MANUAL = "manual"
    STATEMENT = "statement"
    BANK_LINK = "bank_link"
    INVOICE = "invoice"


@dataclass
class Transaction:
    """Read-only transaction record handed to the exporter.

    Attributes:
        id: Unique identifier.
        amount: Amount as stored by the data layer. The sign is not
            trusted; totals are normalized by transaction_type.
        transaction_type: Expense, income or transfer.
        occurred_at: When the transaction happened.
        currency: ISO currency code, if known.
        raw_description: Description as printed on the statement.
        merchant: Cleaned merchant name.
        category_user: Category chosen by the user.
        category_ai: Category suggested by the categorizer.
        user_id: Owner of the transaction.
        source: Origin of the record.
        statement_import_id: Statement the record was imported from.
    """

    id: str
    amount: Decimal
    transaction_type: TransactionType
    occurred_at: datetime
    currency: Optional[str] = None
    raw_description: Optional[str] = None
    merchant: Optional[str] = None
    category_user: Optional[Category] = None
    category_ai: Optional[Category] = None
    user_id: Optional[str] = None
    source: Optional[TransactionSource] = None
    statement_import_id: Optional[str] = None

    @property
    def effective_category(self) -> Optional[Category]:
        """User category, falling back to the AI category."""
        return self.category_user or self.category_ai

    @property
    def category_key(self) -> str:
        """Grouping key: effective category id or "uncategorized"."""
        category = self.effective_category
        if category is None or not category.id:
            return UNCATEGORIZED_KEY
        return category.id

    @property
    def category_name(self) -> str:
        """Display name of the effective category."""
        category = self.effective_category
        if category is None:
            return UNCATEGORIZED_NAME
        return category.display_name

    @property
    def display_description(self) -> str:
        return self.raw_description or self.merchant or MISSING_DESCRIPTION

    @property
    def display_currency(self) -> str:
        return self.currency or DEFAULT_CURRENCY

    @property
    def signed_total_contribution(self) -> Decimal:
        """Amount as it counts towards a category total.

        Expenses always count as -|amount| and everything else as
        +|amount|, whatever sign the stored amount carries.
        """
        if self.transaction_type is TransactionType.EXPENSE:
            return -abs(self.amount)
        return abs(self.amount)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Transaction":
        """Create a Transaction from a data-layer record.

        Args:
            data: Dictionary with the record fields. Nested category
                objects are read from "category_user" and "category_ai".

        Returns:
            A new Transaction instance.

        Raises:
            ValueError: If a required field is missing or malformed.
        """
        for required in ("id", "amount", "type", "occurred_at"):
            if data.get(required) in (None, ""):
                raise ValueError(f"Transaction record is missing '{required}'")

        try:
            transaction_type = TransactionType(str(data["type"]).lower())
        except ValueError as e:
            raise ValueError(f"Unknown transaction type: {data['type']!r}") from e

        source = None
        if data.get("source") is not None:
            try:
                source = TransactionSource(str(data["source"]))
            except ValueError:
                source = None

        return cls(
            id=str(data["id"]),
            amount=to_decimal(data["amount"]),
            transaction_type=transaction_type,
            occurred_at=parse_timestamp(data["occurred_at"]),
            currency=_optional_str(data.get("currency")),
            raw_description=_optional_str(data.get("raw_description")),
            merchant=_optional_str(data.get("merchant")),
            category_user=_optional_category(data.get("category_user")),
            category_ai=_optional_category(data.get("category_ai")),
            user_id=_optional_str(data.get("user_id")),
            source=source,
            statement_import_id=_optional_str(data.get("statement_import_id")),
        )

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self.id!r}, "
            f"occurred_at={self.occurred_at.isoformat()}, "
            f"type={self.transaction_type.value}, "
            f"amount={self.amount}, "
            f"category={self.category_key!r})"
        )


def _optional_str(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def _optional_category(value: object) -> Optional[Category]:
    if isinstance(value, Category):
        return value
    if isinstance(value, dict) and value.get("id") not in (None, ""):
        return Category.from_dict(value)
    return None
