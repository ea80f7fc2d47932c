"""Worksheet, row and cell model with spreadsheet cell addressing."""

import re
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Union

from statement_exporter.errors import BuildError
from statement_exporter.output.shared_strings import SPREADSHEETML_NS, SharedStringTable
from statement_exporter.utils.decimal_utils import format_number

RELATIONSHIPS_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

# Largest column Excel accepts (XFD)
MAX_COLUMN = 16384

_REFERENCE_PATTERN = re.compile(r"^([A-Z]+)([1-9][0-9]*)$")

CellInput = Union[str, int, Decimal]


def column_letter(index: int) -> str:
    """Convert a 1-based column index to its letter name.

    1 -> "A", 26 -> "Z", 27 -> "AA", 703 -> "AAA".

    Raises:
        ValueError: If index is outside 1..MAX_COLUMN.
    """
    if not 1 <= index <= MAX_COLUMN:
        raise ValueError(f"Column index out of range: {index}")

    letters = ""
    while index:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def column_index(letters: str) -> int:
    """Convert a column name such as "AB" back to its 1-based index."""
    if not letters or not letters.isalpha() or not letters.isupper():
        raise ValueError(f"Invalid column name: {letters!r}")

    index = 0
    for ch in letters:
        index = index * 26 + (ord(ch) - ord("A") + 1)
    if index > MAX_COLUMN:
        raise ValueError(f"Column index out of range: {letters}")
    return index


def cell_reference(column: int, row: int) -> str:
    """Build an A1-style reference from 1-based column and row numbers."""
    if row < 1:
        raise ValueError(f"Row number must be positive, got {row}")
    return f"{column_letter(column)}{row}"


def split_reference(reference: str) -> tuple[int, int]:
    """Split an A1-style reference into (column, row)."""
    match = _REFERENCE_PATTERN.match(reference)
    if not match:
        raise ValueError(f"Invalid cell reference: {reference!r}")
    return column_index(match.group(1)), int(match.group(2))


@dataclass
class Cell:
    """A single cell.

    Numeric cells hold their value inline. String cells hold the index of
    their text in the shared string table.
    """

    column: int
    row: int
    value: Union[int, Decimal]
    is_shared_string: bool = False

    @property
    def reference(self) -> str:
        return cell_reference(self.column, self.row)

    def to_element(self) -> ET.Element:
        c = ET.Element("c", {"r": self.reference, "t": "s" if self.is_shared_string else "n"})
        v = ET.SubElement(c, "v")
        if isinstance(self.value, Decimal):
            v.text = format_number(self.value)
        else:
            v.text = str(self.value)
        return c


@dataclass
class Row:
    """A worksheet row. An empty row is still emitted and addressable."""

    number: int
    cells: list[Cell] = field(default_factory=list)

    @property
    def last_column(self) -> int:
        return self.cells[-1].column if self.cells else 0

    def to_element(self) -> ET.Element:
        row = ET.Element("row", {"r": str(self.number)})
        for cell in self.cells:
            row.append(cell.to_element())
        return row


class Worksheet:
    """Rows of one sheet, numbered 1, 2, 3, ... without gaps.

    Text values are interned through the shared string table handed in
    by the package builder; numbers are stored inline.
    """

    def __init__(self, name: str, strings: SharedStringTable):
        self.name = name
        self.strings = strings
        self.rows: list[Row] = []

    @property
    def last_row(self) -> int:
        return self.rows[-1].number if self.rows else 0

    @property
    def last_column(self) -> int:
        return max((row.last_column for row in self.rows), default=0)

    @property
    def dimension(self) -> str:
        """Range bounding every emitted row and cell, e.g. "A1:C7"."""
        if not self.rows:
            return "A1"
        last = cell_reference(max(self.last_column, 1), self.last_row)
        return "A1" if last == "A1" else f"A1:{last}"

    def append_row(self, values: Sequence[Optional[CellInput]] = ()) -> Row:
        """Append the next row, filling columns A, B, C, ... in order.

        Args:
            values: Cell values. Strings go through the shared string
                table; ints and Decimals are stored inline.

        Returns:
            The appended row.

        Raises:
            BuildError: If a value is None or of an unsupported type.
        """
        row = Row(number=self.last_row + 1)
        for column, value in enumerate(values, 1):
            row.cells.append(self._make_cell(column, row.number, value))
        self.add_row(row)
        return row

    def add_row(self, row: Row) -> None:
        """Append a prepared row, enforcing contiguous numbering."""
        expected = self.last_row + 1
        if row.number != expected:
            raise BuildError(
                f"Sheet '{self.name}': expected row {expected}, got row {row.number}"
            )
        columns = [cell.column for cell in row.cells]
        if columns != sorted(set(columns)):
            raise BuildError(
                f"Sheet '{self.name}': cells in row {row.number} are out of order"
            )
        self.rows.append(row)

    def _make_cell(self, column: int, row: int, value: Optional[CellInput]) -> Cell:
        if value is None:
            raise BuildError(
                f"Sheet '{self.name}': missing value for cell {cell_reference(column, row)}"
            )
        if isinstance(value, str):
            return Cell(column, row, self.strings.intern(value), is_shared_string=True)
        if isinstance(value, bool):
            raise BuildError(
                f"Sheet '{self.name}': boolean value for cell {cell_reference(column, row)}"
            )
        if isinstance(value, (int, Decimal)):
            return Cell(column, row, value)
        raise BuildError(
            f"Sheet '{self.name}': unsupported value type {type(value).__name__} "
            f"for cell {cell_reference(column, row)}"
        )

    def to_element(self) -> ET.Element:
        """Render the sheet as a <worksheet> element."""
        worksheet = ET.Element(
            "worksheet", {"xmlns": SPREADSHEETML_NS, "xmlns:r": RELATIONSHIPS_NS}
        )
        ET.SubElement(worksheet, "dimension", {"ref": self.dimension})
        views = ET.SubElement(worksheet, "sheetViews")
        ET.SubElement(views, "sheetView", {"workbookViewId": "0"})
        sheet_data = ET.SubElement(worksheet, "sheetData")
        for row in self.rows:
            sheet_data.append(row.to_element())
        return worksheet
