"""Shared string table for a single spreadsheet package."""

import xml.etree.ElementTree as ET
from typing import Optional

from statement_exporter.errors import BuildError
from statement_exporter.utils.sanitize import sanitize_xml_text

SPREADSHEETML_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"

# Qualified name of the xml:space attribute
XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"


class SharedStringTable:
    """Ordered, de-duplicated strings referenced by index from cells.

    One table belongs to one export call. Indices are assigned in order
    of first use and never change afterwards.

    Attributes:
        references: Number of cell references made through the table.
    """

    def __init__(self) -> None:
        self._strings: list[str] = []
        self._index: dict[str, int] = {}
        self.references = 0

    def __len__(self) -> int:
        return len(self._strings)

    def __contains__(self, value: object) -> bool:
        return value in self._index

    @property
    def unique_count(self) -> int:
        return len(self._strings)

    @property
    def strings(self) -> tuple[str, ...]:
        """Table contents in index order."""
        return tuple(self._strings)

    def intern(self, value: Optional[str]) -> int:
        """Return the index for a string, adding it on first use.

        Every call counts as one cell reference.

        Args:
            value: Text to store.

        Returns:
            Stable index into the table.

        Raises:
            BuildError: If value is None or not a string.
        """
        if value is None:
            raise BuildError("Cannot store a missing value in the shared string table")
        if not isinstance(value, str):
            raise BuildError(
                f"Shared strings must be text, got {type(value).__name__}"
            )

        text = sanitize_xml_text(value)
        index = self._index.get(text)
        if index is None:
            index = len(self._strings)
            self._strings.append(text)
            self._index[text] = index
        self.references += 1
        return index

    def to_element(self) -> ET.Element:
        """Render the table as an <sst> element."""
        sst = ET.Element(
            "sst",
            {
                "xmlns": SPREADSHEETML_NS,
                "count": str(self.unique_count),
                "uniqueCount": str(self.unique_count),
            },
        )
        for text in self._strings:
            si = ET.SubElement(sst, "si")
            t = ET.SubElement(si, "t")
            if text != text.strip():
                t.set(XML_SPACE, "preserve")
            t.text = text
        return sst
