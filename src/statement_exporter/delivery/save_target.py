"""Save-to-location delivery: copy the export into a user-chosen directory."""

import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Optional

from statement_exporter.delivery.base import DeliveryResult, DeliveryStatus, DeliveryTarget
from statement_exporter.errors import DeliveryCancelled, DeliveryError
from statement_exporter.output.storage import reserve_path
from statement_exporter.utils.logging_config import get_logger

logger = get_logger(__name__)

# Asked for a destination directory; returns None when the user cancels.
# Receives the file name and the previously chosen directory (if any).
DirectoryChooser = Callable[[str, Optional[Path]], Optional[Path]]


def fixed_directory_chooser(directory: Path) -> DirectoryChooser:
    """Chooser that always answers with the same directory."""

    def choose(file_name: str, last_directory: Optional[Path]) -> Optional[Path]:
        return directory

    return choose


class SaveToLocationTarget(DeliveryTarget):
    """Copies the export into a directory picked through a chooser.

    The last chosen directory is remembered and offered again on the
    next export. If copying into it fails (for example the directory was
    removed or permission was revoked) the chooser is asked once more.
    """

    def __init__(
        self,
        chooser: Optional[DirectoryChooser],
        last_directory: Optional[Path] = None,
    ):
        """Initialize the target.

        Args:
            chooser: Callable asking for a destination directory. Without
                one the target reports itself unavailable.
            last_directory: Directory to suggest first.
        """
        self.chooser = chooser
        self.last_directory = last_directory

    @property
    def name(self) -> str:
        return "save"

    def is_available(self) -> bool:
        return self.chooser is not None

    def deliver(self, file_path: Path, file_name: str) -> DeliveryResult:
        if self.chooser is None:
            raise DeliveryError("No destination chooser configured")

        directory = self._choose(file_name, self.last_directory)
        try:
            destination = self._copy(file_path, directory, file_name)
        except OSError as first_error:
            logger.warning(
                f"Saving to {directory} failed ({first_error}), asking for a new location"
            )
            directory = self._choose(file_name, None)
            try:
                destination = self._copy(file_path, directory, file_name)
            except OSError as e:
                raise DeliveryError(f"Failed to save {file_name} to {directory}: {e}") from e

        self.last_directory = directory
        logger.info(f"Saved export to {destination}")
        return DeliveryResult(
            status=DeliveryStatus.DELIVERED,
            target=self.name,
            location=destination,
            message=f"Saved to {destination}",
        )

    def _choose(self, file_name: str, suggestion: Optional[Path]) -> Path:
        directory = self.chooser(file_name, suggestion)  # type: ignore[misc]
        if directory is None:
            raise DeliveryCancelled(f"Saving {file_name} was cancelled")
        return Path(directory)

    @staticmethod
    def _copy(file_path: Path, directory: Path, file_name: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        if (directory / file_name).resolve() == file_path.resolve():
            return file_path

        # Existing files in the chosen directory are never overwritten
        destination = reserve_path(directory, file_name)
        try:
            shutil.copy2(file_path, destination)
        except OSError:
            destination.unlink(missing_ok=True)
            raise
        return destination
