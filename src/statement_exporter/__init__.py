"""Statement export to hand-assembled OOXML spreadsheet packages."""

__version__ = "0.1.0"

from statement_exporter.errors import (  # noqa: E402
    BuildError,
    DeliveryCancelled,
    DeliveryError,
    DeliveryUnavailableError,
    EmptyInputError,
    ExportError,
    PersistError,
    SerializeError,
)
from statement_exporter.exporter import (  # noqa: E402
    ExportResult,
    StatementExporter,
    export_statement,
    export_statement_async,
)

__all__ = [
    "__version__",
    "BuildError",
    "DeliveryCancelled",
    "DeliveryError",
    "DeliveryUnavailableError",
    "EmptyInputError",
    "ExportError",
    "ExportResult",
    "PersistError",
    "SerializeError",
    "StatementExporter",
    "export_statement",
    "export_statement_async",
]
