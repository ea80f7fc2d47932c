"""Abstract delivery target and delivery outcome types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class DeliveryStatus(Enum):
    """Outcome of handing an export file to the platform."""

    DELIVERED = "delivered"
    CANCELLED = "cancelled"  # User dismissed the dialog; not an error
    FAILED = "failed"
    UNAVAILABLE = "unavailable"  # No mechanism on this platform


@dataclass
class DeliveryResult:
    """Result of a delivery attempt.

    Attributes:
        status: Outcome of the attempt.
        target: Name of the target that produced the outcome, if any.
        location: Where the file ended up (saved copy or opened file).
        message: Human-readable detail.
    """

    status: DeliveryStatus
    target: Optional[str] = None
    location: Optional[Path] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        """True unless delivery failed or was impossible."""
        return self.status in (DeliveryStatus.DELIVERED, DeliveryStatus.CANCELLED)


class DeliveryTarget(ABC):
    """A way of handing a finished file to the user.

    Subclasses must implement:
    - is_available(): whether the mechanism works on this platform
    - deliver(): hand the file over, raising DeliveryCancelled when the
      user backs out and DeliveryError when the mechanism fails
    """

    @property
    def name(self) -> str:
        """Return target name for logging."""
        return self.__class__.__name__

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether this mechanism can be used on this platform."""

    @abstractmethod
    def deliver(self, file_path: Path, file_name: str) -> DeliveryResult:
        """Hand the file to the user.

        Args:
            file_path: Path of the written export.
            file_name: File name to present to the user.

        Returns:
            DeliveryResult with status DELIVERED.

        Raises:
            DeliveryCancelled: If the user dismissed the dialog.
            DeliveryError: If the mechanism failed.
        """
