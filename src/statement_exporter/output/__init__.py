"""Spreadsheet package construction, serialization and storage."""

from statement_exporter.output.package_builder import PackageBuilder, PackageParts
from statement_exporter.output.serializer import XLSX_MIME_TYPE, serialize
from statement_exporter.output.shared_strings import SharedStringTable
from statement_exporter.output.storage import build_file_name, persist
from statement_exporter.output.worksheet import Worksheet, column_letter

__all__ = [
    "PackageBuilder",
    "PackageParts",
    "SharedStringTable",
    "Worksheet",
    "XLSX_MIME_TYPE",
    "build_file_name",
    "column_letter",
    "persist",
    "serialize",
]
