"""Assembles the parts of an OOXML spreadsheet package for a statement.

The package holds two sheets:
- Summary: headline counts and one row per category
- Transactions: every transaction, most recent first

No spreadsheet library is involved; each part is an ElementTree
document serialized to UTF-8 bytes.
"""

import xml.etree.ElementTree as ET
from collections.abc import Iterator
from dataclasses import dataclass, field
from decimal import Decimal

from statement_exporter.errors import BuildError
from statement_exporter.models.report import AggregateResult
from statement_exporter.models.transaction import Transaction
from statement_exporter.output.shared_strings import SPREADSHEETML_NS, SharedStringTable
from statement_exporter.output.worksheet import RELATIONSHIPS_NS, Worksheet
from statement_exporter.utils.date_utils import (
    DEFAULT_DISPLAY_FORMAT,
    format_display_date,
    sort_key,
)
from statement_exporter.utils.decimal_utils import round_amount
from statement_exporter.utils.logging_config import get_logger

logger = get_logger(__name__)

XML_DECLARATION = b'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'

CONTENT_TYPES_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
PACKAGE_RELATIONSHIPS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"

REL_TYPE_OFFICE_DOCUMENT = f"{RELATIONSHIPS_NS}/officeDocument"
REL_TYPE_WORKSHEET = f"{RELATIONSHIPS_NS}/worksheet"
REL_TYPE_SHARED_STRINGS = f"{RELATIONSHIPS_NS}/sharedStrings"
REL_TYPE_STYLES = f"{RELATIONSHIPS_NS}/styles"

CT_RELATIONSHIPS = "application/vnd.openxmlformats-package.relationships+xml"
CT_XML = "application/xml"
CT_WORKBOOK = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet.main+xml"
CT_WORKSHEET = "application/vnd.openxmlformats-officedocument.spreadsheetml.worksheet+xml"
CT_SHARED_STRINGS = "application/vnd.openxmlformats-officedocument.spreadsheetml.sharedStrings+xml"
CT_STYLES = "application/vnd.openxmlformats-officedocument.spreadsheetml.styles+xml"

# Fixed part paths inside the archive
CONTENT_TYPES_PATH = "[Content_Types].xml"
ROOT_RELS_PATH = "_rels/.rels"
WORKBOOK_PATH = "xl/workbook.xml"
WORKBOOK_RELS_PATH = "xl/_rels/workbook.xml.rels"
STYLES_PATH = "xl/styles.xml"
SHARED_STRINGS_PATH = "xl/sharedStrings.xml"
SUMMARY_SHEET_PATH = "xl/worksheets/sheet1.xml"
TRANSACTIONS_SHEET_PATH = "xl/worksheets/sheet2.xml"

PART_PATHS = (
    CONTENT_TYPES_PATH,
    ROOT_RELS_PATH,
    WORKBOOK_PATH,
    WORKBOOK_RELS_PATH,
    STYLES_PATH,
    SHARED_STRINGS_PATH,
    SUMMARY_SHEET_PATH,
    TRANSACTIONS_SHEET_PATH,
)

SUMMARY_SHEET_NAME = "Summary"
TRANSACTIONS_SHEET_NAME = "Transactions"

SUMMARY_TITLE = "Statement Export Summary"
SUMMARY_HEADERS = ("Category", "Transaction Count", "Total Amount")
TRANSACTION_HEADERS = ("Date", "Description", "Category", "Type", "Amount", "Currency")


@dataclass(frozen=True)
class SheetEntry:
    """A sheet as the workbook and its relationships see it."""

    name: str
    sheet_id: int
    rel_id: str
    path: str

    @property
    def rels_target(self) -> str:
        """Target relative to the xl/ directory."""
        return self.path.removeprefix("xl/")


SHEETS = (
    SheetEntry(SUMMARY_SHEET_NAME, 1, "rId1", SUMMARY_SHEET_PATH),
    SheetEntry(TRANSACTIONS_SHEET_NAME, 2, "rId2", TRANSACTIONS_SHEET_PATH),
)


@dataclass
class PackageParts:
    """Serialized package parts keyed by their path in the archive.

    Attributes:
        parts: Part path to XML bytes, in archive order.
        shared_string_count: Number of unique shared strings.
        transaction_count: Transactions on the Transactions sheet.
        category_count: Category rows on the Summary sheet.
        row_counts: Emitted rows per sheet name.
        dimensions: Declared dimension range per sheet name.
    """

    parts: dict[str, bytes] = field(default_factory=dict)
    shared_string_count: int = 0
    transaction_count: int = 0
    category_count: int = 0
    row_counts: dict[str, int] = field(default_factory=dict)
    dimensions: dict[str, str] = field(default_factory=dict)

    def __getitem__(self, path: str) -> bytes:
        return self.parts[path]

    def __contains__(self, path: object) -> bool:
        return path in self.parts

    def __iter__(self) -> Iterator[str]:
        return iter(self.parts)

    def __len__(self) -> int:
        return len(self.parts)

    def missing_parts(self) -> list[str]:
        """Required part paths that are absent."""
        return [path for path in PART_PATHS if path not in self.parts]


def to_xml_bytes(element: ET.Element) -> bytes:
    """Serialize an element as a standalone UTF-8 XML document."""
    return XML_DECLARATION + ET.tostring(element, encoding="utf-8")


class PackageBuilder:
    """Builds the in-memory parts of one statement's spreadsheet package.

    A builder holds no state between calls; every build() creates its
    own shared string table and worksheets.
    """

    def __init__(self, date_format: str = DEFAULT_DISPLAY_FORMAT, decimal_places: int = 2):
        """Initialize the builder.

        Args:
            date_format: strftime pattern for the Transactions date column.
            decimal_places: Rounding applied to amounts and totals.
        """
        self.date_format = date_format
        self.decimal_places = decimal_places

    def build(
        self, transactions: list[Transaction], aggregated: AggregateResult
    ) -> PackageParts:
        """Build every package part.

        The Summary sheet is built before the Transactions sheet, which
        fixes the shared string indices for a given input.

        Args:
            transactions: Transactions of the statement.
            aggregated: Result of aggregate() over the same transactions.

        Returns:
            PackageParts holding all eight parts.

        Raises:
            BuildError: If the aggregate is inconsistent with the input or
                an amount is too large to round.
        """
        self._check_consistency(transactions, aggregated)

        strings = SharedStringTable()
        summary = self._build_summary_sheet(transactions, aggregated, strings)
        transaction_sheet = self._build_transactions_sheet(transactions, strings)

        package = PackageParts()
        package.parts[CONTENT_TYPES_PATH] = to_xml_bytes(self._content_types())
        package.parts[ROOT_RELS_PATH] = to_xml_bytes(self._root_relationships())
        package.parts[WORKBOOK_PATH] = to_xml_bytes(self._workbook())
        package.parts[WORKBOOK_RELS_PATH] = to_xml_bytes(self._workbook_relationships())
        package.parts[STYLES_PATH] = to_xml_bytes(self._styles())
        package.parts[SHARED_STRINGS_PATH] = to_xml_bytes(strings.to_element())
        package.parts[SUMMARY_SHEET_PATH] = to_xml_bytes(summary.to_element())
        package.parts[TRANSACTIONS_SHEET_PATH] = to_xml_bytes(transaction_sheet.to_element())

        package.shared_string_count = strings.unique_count
        package.transaction_count = len(transactions)
        package.category_count = aggregated.category_count
        for sheet in (summary, transaction_sheet):
            package.row_counts[sheet.name] = sheet.last_row
            package.dimensions[sheet.name] = sheet.dimension

        logger.info(
            f"Built package: {strings.unique_count} shared strings "
            f"({strings.references} references), "
            f"summary rows={summary.last_row}, transaction rows={transaction_sheet.last_row}"
        )
        return package

    @staticmethod
    def _check_consistency(
        transactions: list[Transaction], aggregated: AggregateResult
    ) -> None:
        if not transactions:
            raise BuildError("Cannot build a package without transactions")

        for key, group in aggregated.groups.items():
            if not group:
                raise BuildError(f"Category group '{key}' has no transactions")

        if aggregated.transaction_count != len(transactions):
            raise BuildError(
                f"Aggregate covers {aggregated.transaction_count} transactions, "
                f"input has {len(transactions)}"
            )

    def _build_summary_sheet(
        self,
        transactions: list[Transaction],
        aggregated: AggregateResult,
        strings: SharedStringTable,
    ) -> Worksheet:
        ws = Worksheet(SUMMARY_SHEET_NAME, strings)

        ws.append_row([SUMMARY_TITLE])
        ws.append_row(["Total Transactions", len(transactions)])
        ws.append_row(["Total Categories", aggregated.category_count])
        ws.append_row([])  # spacer
        ws.append_row(list(SUMMARY_HEADERS))

        for group in aggregated.iter_groups():
            ws.append_row([
                group.name,
                group.count,
                self._round(group.total, f"total of category {group.name!r}"),
            ])

        logger.debug(f"Summary sheet: {ws.last_row} rows, dimension {ws.dimension}")
        return ws

    def _build_transactions_sheet(
        self, transactions: list[Transaction], strings: SharedStringTable
    ) -> Worksheet:
        ws = Worksheet(TRANSACTIONS_SHEET_NAME, strings)
        ws.append_row(list(TRANSACTION_HEADERS))

        # sorted() is stable, so equal timestamps keep their input order
        ordered = sorted(transactions, key=lambda t: sort_key(t.occurred_at), reverse=True)
        for t in ordered:
            ws.append_row([
                format_display_date(t.occurred_at, self.date_format),
                t.display_description,
                t.category_name,
                t.transaction_type.value,
                self._round(t.amount, f"amount of transaction {t.id!r}"),
                t.display_currency,
            ])

        logger.debug(f"Transactions sheet: {ws.last_row} rows, dimension {ws.dimension}")
        return ws

    def _round(self, amount: Decimal, what: str) -> Decimal:
        try:
            return round_amount(amount, self.decimal_places)
        except ValueError as e:
            raise BuildError(f"Cannot write {what}: {e}") from e

    @staticmethod
    def _content_types() -> ET.Element:
        types = ET.Element("Types", {"xmlns": CONTENT_TYPES_NS})
        ET.SubElement(types, "Default", {"Extension": "rels", "ContentType": CT_RELATIONSHIPS})
        ET.SubElement(types, "Default", {"Extension": "xml", "ContentType": CT_XML})
        ET.SubElement(types, "Override", {"PartName": f"/{WORKBOOK_PATH}", "ContentType": CT_WORKBOOK})
        for sheet in SHEETS:
            ET.SubElement(types, "Override", {"PartName": f"/{sheet.path}", "ContentType": CT_WORKSHEET})
        ET.SubElement(
            types, "Override", {"PartName": f"/{SHARED_STRINGS_PATH}", "ContentType": CT_SHARED_STRINGS}
        )
        ET.SubElement(types, "Override", {"PartName": f"/{STYLES_PATH}", "ContentType": CT_STYLES})
        return types

    @staticmethod
    def _root_relationships() -> ET.Element:
        rels = ET.Element("Relationships", {"xmlns": PACKAGE_RELATIONSHIPS_NS})
        ET.SubElement(
            rels,
            "Relationship",
            {"Id": "rId1", "Type": REL_TYPE_OFFICE_DOCUMENT, "Target": WORKBOOK_PATH},
        )
        return rels

    @staticmethod
    def _workbook() -> ET.Element:
        workbook = ET.Element(
            "workbook", {"xmlns": SPREADSHEETML_NS, "xmlns:r": RELATIONSHIPS_NS}
        )
        ET.SubElement(workbook, "workbookPr")
        views = ET.SubElement(workbook, "bookViews")
        ET.SubElement(views, "workbookView", {"activeTab": "0"})
        sheets = ET.SubElement(workbook, "sheets")
        for sheet in SHEETS:
            ET.SubElement(
                sheets,
                "sheet",
                {"name": sheet.name, "sheetId": str(sheet.sheet_id), "r:id": sheet.rel_id},
            )
        return workbook

    @staticmethod
    def _workbook_relationships() -> ET.Element:
        rels = ET.Element("Relationships", {"xmlns": PACKAGE_RELATIONSHIPS_NS})
        for sheet in SHEETS:
            ET.SubElement(
                rels,
                "Relationship",
                {"Id": sheet.rel_id, "Type": REL_TYPE_WORKSHEET, "Target": sheet.rels_target},
            )
        next_id = len(SHEETS) + 1
        ET.SubElement(
            rels,
            "Relationship",
            {
                "Id": f"rId{next_id}",
                "Type": REL_TYPE_SHARED_STRINGS,
                "Target": SHARED_STRINGS_PATH.removeprefix("xl/"),
            },
        )
        ET.SubElement(
            rels,
            "Relationship",
            {
                "Id": f"rId{next_id + 1}",
                "Type": REL_TYPE_STYLES,
                "Target": STYLES_PATH.removeprefix("xl/"),
            },
        )
        return rels

    @staticmethod
    def _styles() -> ET.Element:
        # Spreadsheet applications reject a package without a styles part,
        # even when no cell uses custom formatting.
        style_sheet = ET.Element("styleSheet", {"xmlns": SPREADSHEETML_NS})

        fonts = ET.SubElement(style_sheet, "fonts", {"count": "1"})
        font = ET.SubElement(fonts, "font")
        ET.SubElement(font, "sz", {"val": "11"})
        ET.SubElement(font, "color", {"theme": "1"})
        ET.SubElement(font, "name", {"val": "Calibri"})
        ET.SubElement(font, "family", {"val": "2"})
        ET.SubElement(font, "scheme", {"val": "minor"})

        # Excel expects the two reserved fills at index 0 and 1
        fills = ET.SubElement(style_sheet, "fills", {"count": "2"})
        for pattern in ("none", "gray125"):
            fill = ET.SubElement(fills, "fill")
            ET.SubElement(fill, "patternFill", {"patternType": pattern})

        borders = ET.SubElement(style_sheet, "borders", {"count": "1"})
        border = ET.SubElement(borders, "border")
        for side in ("left", "right", "top", "bottom", "diagonal"):
            ET.SubElement(border, side)

        xf_ids = {"numFmtId": "0", "fontId": "0", "fillId": "0", "borderId": "0"}
        style_xfs = ET.SubElement(style_sheet, "cellStyleXfs", {"count": "1"})
        ET.SubElement(style_xfs, "xf", dict(xf_ids))
        cell_xfs = ET.SubElement(style_sheet, "cellXfs", {"count": "1"})
        ET.SubElement(cell_xfs, "xf", {**xf_ids, "xfId": "0"})

        cell_styles = ET.SubElement(style_sheet, "cellStyles", {"count": "1"})
        ET.SubElement(cell_styles, "cellStyle", {"name": "Normal", "xfId": "0", "builtinId": "0"})
        return style_sheet
