"""Input collaborators supplying statement transactions."""

from statement_exporter.sources.json_source import (
    SourceError,
    load_records,
    load_transactions,
    parse_records,
    select_statement_transactions,
)

__all__ = [
    "SourceError",
    "load_records",
    "load_transactions",
    "parse_records",
    "select_statement_transactions",
]
