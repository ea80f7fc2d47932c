"""Packs spreadsheet package parts into a DEFLATE-compressed ZIP archive."""

import io
import zipfile
import zlib

from statement_exporter.errors import SerializeError
from statement_exporter.output.package_builder import PART_PATHS, PackageParts
from statement_exporter.utils.logging_config import get_logger

logger = get_logger(__name__)

# Fixed entry timestamp so identical packages produce identical archives
ZIP_ENTRY_DATE = (1980, 1, 1, 0, 0, 0)

# MIME type of the resulting archive
XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def serialize(package: PackageParts) -> bytes:
    """Serialize every part into an in-memory ZIP archive.

    Parts are written content types first, then in the order the
    package holds them. Consumers locate parts by path, so only the
    paths themselves are significant.

    Args:
        package: Parts produced by PackageBuilder.build().

    Returns:
        Archive bytes.

    Raises:
        SerializeError: If a required part is missing or the archive
            cannot be written.
    """
    missing = package.missing_parts()
    if missing:
        raise SerializeError(f"Package is missing required parts: {', '.join(missing)}")

    order = [path for path in PART_PATHS if path in package]
    order.extend(path for path in package if path not in PART_PATHS)

    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for path in order:
                data = package[path]
                if not isinstance(data, bytes):
                    raise SerializeError(f"Part '{path}' is not bytes")
                info = zipfile.ZipInfo(path, date_time=ZIP_ENTRY_DATE)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.external_attr = 0o644 << 16
                archive.writestr(info, data)
    except SerializeError:
        raise
    except (OSError, ValueError, zlib.error, MemoryError) as e:
        raise SerializeError(f"Failed to build archive: {e}") from e

    data = buffer.getvalue()
    logger.info(f"Serialized {len(order)} parts into {len(data)} byte archive")
    return data
