"""Re-opens a written package with openpyxl to confirm it is readable."""

from dataclasses import dataclass, field
from pathlib import Path

from openpyxl import load_workbook

from statement_exporter.utils.logging_config import get_logger

logger = get_logger(__name__)


class VerificationError(Exception):
    """Exception raised when a written package cannot be read back."""

    def __init__(self, message: str, file_path: Path | None = None):
        self.file_path = file_path
        super().__init__(message)


@dataclass
class PackageReport:
    """What a standard reader sees in the package.

    Attributes:
        sheet_names: Sheet names in workbook order.
        row_counts: Highest row number per sheet.
        column_counts: Highest column number per sheet.
    """

    sheet_names: list[str] = field(default_factory=list)
    row_counts: dict[str, int] = field(default_factory=dict)
    column_counts: dict[str, int] = field(default_factory=dict)


def verify_package(file_path: Path) -> PackageReport:
    """Load the package with openpyxl and summarize its sheets.

    Args:
        file_path: Path to the .xlsx file.

    Returns:
        PackageReport describing the sheets.

    Raises:
        VerificationError: If openpyxl cannot load the file.
    """
    try:
        wb = load_workbook(file_path, data_only=True)
    except Exception as e:
        raise VerificationError(f"Cannot open {file_path}: {e}", file_path) from e

    report = PackageReport()
    try:
        for ws in wb.worksheets:
            report.sheet_names.append(ws.title)
            report.row_counts[ws.title] = ws.max_row
            report.column_counts[ws.title] = ws.max_column
    finally:
        wb.close()

    logger.debug(f"Verified {file_path}: sheets={report.sheet_names}")
    return report
