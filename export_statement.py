#!/usr/bin/env python3
"""Statement to spreadsheet exporter.

This is the main entry point script for the statement exporter.
It wraps the package CLI for convenient execution.

Usage:
    python export_statement.py transactions.json --name "May 2024.pdf"

For full documentation and options:
    python export_statement.py --help
"""

import sys
from pathlib import Path

# Add src to path for development installs
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from statement_exporter.cli import main

if __name__ == "__main__":
    sys.exit(main())
