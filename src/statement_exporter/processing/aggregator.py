"""Groups statement transactions by effective category."""

from decimal import Decimal

from statement_exporter.errors import EmptyInputError
from statement_exporter.models.report import AggregateResult
from statement_exporter.models.transaction import Transaction
from statement_exporter.utils.logging_config import get_logger

logger = get_logger(__name__)


def aggregate(transactions: list[Transaction]) -> AggregateResult:
    """Group transactions by category and compute per-category totals.

    Totals are sign-normalized by transaction type: expenses add
    -|amount| and income adds +|amount|, regardless of the stored sign.

    Args:
        transactions: Transactions of one statement.

    Returns:
        AggregateResult with groups in order of first encounter.

    Raises:
        EmptyInputError: If no transactions were supplied.
    """
    if not transactions:
        raise EmptyInputError()

    groups: dict[str, list[Transaction]] = {}
    totals: dict[str, Decimal] = {}

    for t in transactions:
        key = t.category_key
        groups.setdefault(key, []).append(t)
        totals[key] = totals.get(key, Decimal("0")) + t.signed_total_contribution

    logger.debug(
        f"Aggregated {len(transactions)} transactions into {len(groups)} categories"
    )
    return AggregateResult(groups=groups, totals_by_category=totals)
