"""Reads data-layer transaction records from a JSON export."""

import json
from pathlib import Path
from typing import Optional

from statement_exporter.models.transaction import Transaction, TransactionSource
from statement_exporter.utils.date_utils import sort_key
from statement_exporter.utils.logging_config import get_logger

logger = get_logger(__name__)

# Refuse absurdly large inputs before reading them into memory (50 MB)
MAX_SOURCE_FILE_SIZE = 50 * 1024 * 1024


class SourceError(Exception):
    """Exception raised when transaction records cannot be read."""

    def __init__(self, message: str, file_path: Optional[Path] = None):
        """Initialize SourceError.

        Args:
            message: Error message.
            file_path: Optional path to the file that failed to load.
        """
        self.file_path = file_path
        super().__init__(message)


def load_records(file_path: Path) -> list[dict[str, object]]:
    """Load raw transaction records from a JSON file.

    Accepts either a list of records or an object with a
    "transactions" list. Records shaped like a join-table row
    ({"transaction": {...}}) are unwrapped.

    Args:
        file_path: Path to the JSON file.

    Returns:
        List of record dictionaries.

    Raises:
        SourceError: If the file is missing, too large or malformed.
    """
    if not file_path.exists():
        raise SourceError(f"Input file not found: {file_path}", file_path)
    if file_path.stat().st_size > MAX_SOURCE_FILE_SIZE:
        raise SourceError(
            f"Input file exceeds {MAX_SOURCE_FILE_SIZE // (1024 * 1024)} MB limit", file_path
        )

    try:
        with open(file_path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SourceError(f"Cannot read {file_path}: {e}", file_path) from e

    if isinstance(data, dict):
        data = data.get("transactions")
    if not isinstance(data, list):
        raise SourceError(
            "Expected a list of transactions or an object with a 'transactions' list",
            file_path,
        )

    records: list[dict[str, object]] = []
    for item in data:
        if isinstance(item, dict) and isinstance(item.get("transaction"), dict):
            item = item["transaction"]
        if isinstance(item, dict):
            records.append(item)
        else:
            logger.warning(f"Skipping non-object record in {file_path}: {item!r}")
    return records


def parse_records(
    records: list[dict[str, object]], strict: bool = False
) -> list[Transaction]:
    """Convert raw records into Transactions.

    Args:
        records: Record dictionaries.
        strict: Raise on the first malformed record instead of skipping it.

    Returns:
        Parsed transactions in input order.

    Raises:
        SourceError: In strict mode, if a record is malformed.
    """
    transactions: list[Transaction] = []
    for position, record in enumerate(records, 1):
        try:
            transactions.append(Transaction.from_dict(record))
        except ValueError as e:
            if strict:
                raise SourceError(f"Record {position}: {e}") from e
            logger.warning(f"Skipping record {position}: {e}")
    return transactions


def select_statement_transactions(
    transactions: list[Transaction],
    user_id: Optional[str] = None,
    statement_id: Optional[str] = None,
) -> list[Transaction]:
    """Keep the transactions that belong to one imported statement.

    A transaction qualifies when it was imported from a statement, belongs
    to the user (when user_id is given) and is linked to the statement
    (when statement_id is given). Records without a source are assumed
    to come from the statement.

    Returns:
        Matching transactions, most recent first.
    """
    selected = []
    for t in transactions:
        if t.source is not None and t.source is not TransactionSource.STATEMENT:
            continue
        if user_id is not None and t.user_id != user_id:
            continue
        if statement_id is not None and t.statement_import_id != statement_id:
            continue
        selected.append(t)

    selected.sort(key=lambda t: sort_key(t.occurred_at), reverse=True)
    logger.info(
        f"Selected {len(selected)} of {len(transactions)} transactions"
        + (f" for statement {statement_id}" if statement_id else "")
    )
    return selected


def load_transactions(
    file_path: Path,
    user_id: Optional[str] = None,
    statement_id: Optional[str] = None,
    strict: bool = False,
) -> list[Transaction]:
    """Load, parse and select a statement's transactions from a JSON file."""
    records = load_records(file_path)
    transactions = parse_records(records, strict=strict)
    return select_statement_transactions(transactions, user_id, statement_id)
