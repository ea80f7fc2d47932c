"""Sanitization utilities for file names and spreadsheet text."""

import re
from typing import Optional

# Anything that is not an ASCII letter or digit is replaced in file names
_UNSAFE_FILENAME_PATTERN = re.compile(r"[^A-Za-z0-9]")

# Characters that XML 1.0 does not allow in text content
_XML_ILLEGAL_PATTERN = re.compile(
    r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]"
)


def sanitize_filename_component(name: str) -> str:
    """Sanitize a string for use inside an export file name.

    Every character outside [A-Za-z0-9] becomes an underscore, so
    "May 2024.pdf" turns into "May_2024_pdf".

    Args:
        name: String to sanitize.

    Returns:
        Safe file name component ("statement" if nothing is left).
    """
    safe = _UNSAFE_FILENAME_PATTERN.sub("_", name or "")
    return safe or "statement"


def sanitize_xml_text(value: Optional[str]) -> Optional[str]:
    """Strip characters that cannot be represented in an XML document.

    Args:
        value: Text to clean, or None.

    Returns:
        Cleaned text, or None if input was None.
    """
    if value is None:
        return None
    return _XML_ILLEGAL_PATTERN.sub("", value)
