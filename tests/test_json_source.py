"""Tests for loading transaction records from JSON."""

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

import pytest

from statement_exporter.models.transaction import Transaction, TransactionSource, TransactionType
from statement_exporter.sources.json_source import (
    SourceError,
    load_records,
    load_transactions,
    parse_records,
    select_statement_transactions,
)


def create_record(
    txn_id: str = "t1",
    amount: object = "25.00",
    txn_type: str = "expense",
    occurred_at: str = "2024-05-01T10:00:00Z",
    **extra: object,
) -> dict[str, object]:
    """Helper to create a raw data-layer record."""
    record: dict[str, object] = {
        "id": txn_id,
        "amount": amount,
        "type": txn_type,
        "occurred_at": occurred_at,
    }
    record.update(extra)
    return record


def write_json(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestTransactionFromDict:
    """Tests for Transaction.from_dict."""

    def test_full_record(self) -> None:
        """Test a record with nested categories."""
        txn = Transaction.from_dict(
            create_record(
                raw_description="UPI/Swiggy",
                merchant="Swiggy",
                currency="INR",
                category_user={"id": "food", "name": "Food", "type": "expense"},
                category_ai={"id": "misc", "name": "Misc"},
                user_id="u1",
                source="statement",
                statement_import_id="42",
            )
        )

        assert txn.amount == Decimal("25.00")
        assert txn.transaction_type is TransactionType.EXPENSE
        assert txn.occurred_at == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
        assert txn.category_key == "food"
        assert txn.category_ai.name == "Misc"
        assert txn.source is TransactionSource.STATEMENT

    def test_float_amount_is_exact(self) -> None:
        """Test that float amounts do not pick up binary noise."""
        txn = Transaction.from_dict(create_record(amount=0.1))
        assert txn.amount == Decimal("0.1")

    def test_type_case_insensitive(self) -> None:
        """Test that INCOME and income are the same."""
        txn = Transaction.from_dict(create_record(txn_type="INCOME"))
        assert txn.transaction_type is TransactionType.INCOME

    @pytest.mark.parametrize("missing", ["id", "amount", "type", "occurred_at"])
    def test_missing_required_field(self, missing: str) -> None:
        """Test that required fields are enforced."""
        record = create_record()
        del record[missing]
        with pytest.raises(ValueError, match=missing):
            Transaction.from_dict(record)

    def test_unknown_type(self) -> None:
        """Test that an unknown transaction type is rejected."""
        with pytest.raises(ValueError, match="Unknown transaction type"):
            Transaction.from_dict(create_record(txn_type="refund"))

    def test_bad_amount(self) -> None:
        """Test that a non-numeric amount is rejected."""
        with pytest.raises(ValueError):
            Transaction.from_dict(create_record(amount="twelve"))

    @pytest.mark.parametrize("amount", [1e30, "-1e16", "1000000000000000"])
    def test_amount_out_of_range(self, amount: object) -> None:
        """Test that amounts a spreadsheet cannot hold exactly are rejected."""
        with pytest.raises(ValueError, match="out of range"):
            Transaction.from_dict(create_record(amount=amount))

    def test_largest_amount_accepted(self) -> None:
        """Test the upper edge of the accepted range."""
        txn = Transaction.from_dict(create_record(amount="999999999999999.99"))
        assert txn.amount == Decimal("999999999999999.99")

    def test_category_without_id_ignored(self) -> None:
        """Test that a category object without id counts as none."""
        txn = Transaction.from_dict(create_record(category_user={"name": "Ghost"}))
        assert txn.category_key == "uncategorized"


class TestLoadRecords:
    """Tests for load_records function."""

    def test_list_of_records(self, tmp_path: Path) -> None:
        """Test a top-level JSON list."""
        path = write_json(tmp_path / "t.json", [create_record("1"), create_record("2")])
        assert [r["id"] for r in load_records(path)] == ["1", "2"]

    def test_transactions_key(self, tmp_path: Path) -> None:
        """Test an object with a transactions list."""
        path = write_json(tmp_path / "t.json", {"transactions": [create_record("1")]})
        assert len(load_records(path)) == 1

    def test_join_rows_unwrapped(self, tmp_path: Path) -> None:
        """Test rows shaped like {"transaction": {...}}."""
        path = write_json(tmp_path / "t.json", [{"transaction": create_record("9")}])
        assert load_records(path)[0]["id"] == "9"

    def test_non_object_records_skipped(self, tmp_path: Path) -> None:
        """Test that scalars in the list are skipped."""
        path = write_json(tmp_path / "t.json", [create_record("1"), 42, "x"])
        assert len(load_records(path)) == 1

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing input file."""
        with pytest.raises(SourceError, match="not found"):
            load_records(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Test malformed JSON."""
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SourceError):
            load_records(path)

    def test_wrong_shape(self, tmp_path: Path) -> None:
        """Test a JSON object without a transactions list."""
        path = write_json(tmp_path / "t.json", {"items": []})
        with pytest.raises(SourceError, match="Expected a list"):
            load_records(path)

    def test_file_too_large(self, tmp_path: Path) -> None:
        """Test the size limit."""
        path = write_json(tmp_path / "t.json", [])
        with patch("statement_exporter.sources.json_source.MAX_SOURCE_FILE_SIZE", 1):
            with pytest.raises(SourceError, match="limit"):
                load_records(path)


class TestParseRecords:
    """Tests for parse_records function."""

    def test_malformed_skipped(self) -> None:
        """Test lenient parsing."""
        records = [create_record("1"), {"id": "2"}, create_record("3")]
        assert [t.id for t in parse_records(records)] == ["1", "3"]

    def test_strict_raises(self) -> None:
        """Test strict parsing."""
        records = [create_record("1"), {"id": "2"}]
        with pytest.raises(SourceError, match="Record 2"):
            parse_records(records, strict=True)


class TestSelectStatementTransactions:
    """Tests for select_statement_transactions function."""

    def create_transactions(self) -> list[Transaction]:
        base = datetime(2024, 5, 1, tzinfo=timezone.utc)
        records = [
            create_record("old", occurred_at=(base).isoformat(), user_id="u1",
                          source="statement", statement_import_id="s1"),
            create_record("new", occurred_at=(base + timedelta(days=2)).isoformat(),
                          user_id="u1", source="statement", statement_import_id="s1"),
            create_record("manual", occurred_at=(base + timedelta(days=1)).isoformat(),
                          user_id="u1", source="manual"),
            create_record("other-user", occurred_at=base.isoformat(), user_id="u2",
                          source="statement", statement_import_id="s1"),
            create_record("other-stmt", occurred_at=base.isoformat(), user_id="u1",
                          source="statement", statement_import_id="s2"),
        ]
        return parse_records(records)

    def test_filters_by_user_and_statement(self) -> None:
        """Test selection of one user's statement import."""
        selected = select_statement_transactions(
            self.create_transactions(), user_id="u1", statement_id="s1"
        )
        assert [t.id for t in selected] == ["new", "old"]

    def test_excludes_non_statement_sources(self) -> None:
        """Test that manually entered transactions are not exported."""
        selected = select_statement_transactions(self.create_transactions())
        assert "manual" not in [t.id for t in selected]

    def test_missing_source_kept(self) -> None:
        """Test that records without a source are treated as statement rows."""
        selected = select_statement_transactions(parse_records([create_record("x")]))
        assert [t.id for t in selected] == ["x"]

    def test_load_transactions(self, tmp_path: Path) -> None:
        """Test the combined load, parse and select."""
        path = write_json(
            tmp_path / "t.json",
            [create_record("1", user_id="u1"), create_record("2", user_id="u2")],
        )
        assert [t.id for t in load_transactions(path, user_id="u2")] == ["2"]
