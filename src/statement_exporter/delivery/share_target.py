"""Share delivery: open the export with the platform's default handler."""

import os
import shutil
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Optional

from statement_exporter.delivery.base import DeliveryResult, DeliveryStatus, DeliveryTarget
from statement_exporter.errors import DeliveryError
from statement_exporter.utils.logging_config import get_logger

logger = get_logger(__name__)

Opener = Callable[[Path], None]


def _command_opener(command: str) -> Opener:
    def open_file(path: Path) -> None:
        subprocess.run([command, str(path)], check=True)

    return open_file


def detect_opener() -> Optional[Opener]:
    """Find the default-application launcher for this platform.

    Returns:
        A callable opening a file, or None if the platform has none.
    """
    if sys.platform.startswith("win"):
        startfile = getattr(os, "startfile", None)
        if startfile is None:
            return None
        return lambda path: startfile(str(path))

    command = "open" if sys.platform == "darwin" else "xdg-open"
    if shutil.which(command) is None:
        return None
    return _command_opener(command)


class ShareTarget(DeliveryTarget):
    """Hands the file to whatever application the platform associates with .xlsx."""

    def __init__(self, opener: Optional[Opener] = None, detect: bool = True):
        """Initialize the target.

        Args:
            opener: Callable that opens a file. Detected when omitted.
            detect: Whether to look for an opener when none is given.
        """
        if opener is None and detect:
            opener = detect_opener()
        self.opener = opener

    @property
    def name(self) -> str:
        return "share"

    def is_available(self) -> bool:
        return self.opener is not None

    def deliver(self, file_path: Path, file_name: str) -> DeliveryResult:
        if self.opener is None:
            raise DeliveryError("No application available to open the export")

        try:
            self.opener(file_path)
        except (OSError, subprocess.CalledProcessError) as e:
            raise DeliveryError(f"Failed to open {file_name}: {e}") from e

        logger.info(f"Handed {file_path} to the default application")
        return DeliveryResult(
            status=DeliveryStatus.DELIVERED,
            target=self.name,
            location=file_path,
            message=f"Opened {file_name}",
        )
