"""Transaction processing ahead of spreadsheet construction."""

from statement_exporter.processing.aggregator import aggregate

__all__ = [
    "aggregate",
]
