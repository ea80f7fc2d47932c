"""Exception types raised by the export pipeline."""

from pathlib import Path
from typing import Optional


class ExportError(Exception):
    """Base class for failures that abort an export.

    Attributes:
        stage: Pipeline stage that failed (aggregate, build, serialize,
            persist, deliver).
    """

    stage = "export"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class EmptyInputError(ExportError):
    """No transactions were supplied for the requested statement."""

    stage = "aggregate"

    def __init__(self, message: str = "No transactions found for this statement"):
        super().__init__(message)


class BuildError(ExportError):
    """The in-memory package could not be assembled."""

    stage = "build"


class SerializeError(ExportError):
    """The package parts could not be packed into a ZIP archive."""

    stage = "serialize"


class PersistError(ExportError):
    """The archive could not be written to disk."""

    stage = "persist"

    def __init__(self, message: str, file_path: Optional[Path] = None):
        """Initialize PersistError.

        Args:
            message: Error message.
            file_path: Optional path that could not be written.
        """
        self.file_path = file_path
        super().__init__(message)


class DeliveryUnavailableError(ExportError):
    """Neither the save-to-location nor the share mechanism is available."""

    stage = "deliver"


class DeliveryError(ExportError):
    """A delivery mechanism was available but failed."""

    stage = "deliver"


class DeliveryCancelled(Exception):
    """The user dismissed the save/share dialog.

    Not an ExportError: the orchestrator turns it into a cancelled
    delivery status and still reports the created file.
    """
