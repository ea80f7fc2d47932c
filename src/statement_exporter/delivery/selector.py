"""Chooses a delivery target and applies the fallback order."""

from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from statement_exporter.config import DeliveryConfig
from statement_exporter.delivery.base import DeliveryResult, DeliveryStatus, DeliveryTarget
from statement_exporter.delivery.save_target import (
    DirectoryChooser,
    SaveToLocationTarget,
    fixed_directory_chooser,
)
from statement_exporter.delivery.share_target import ShareTarget
from statement_exporter.errors import DeliveryCancelled, DeliveryError, DeliveryUnavailableError
from statement_exporter.utils.logging_config import get_logger

logger = get_logger(__name__)

UNAVAILABLE_MESSAGE = "Neither saving to a location nor sharing is available on this platform"


def build_targets(
    delivery_config: DeliveryConfig,
    chooser: Optional[DirectoryChooser] = None,
) -> list[DeliveryTarget]:
    """Create delivery targets in fallback order for the configured mode.

    Modes:
    - auto: save to location, then share
    - save: save to location only
    - share: share only
    - none: no delivery

    Args:
        delivery_config: Delivery section of the configuration.
        chooser: Interactive destination chooser. A configured
            save_directory is used when no chooser is given.

    Returns:
        Targets in the order they should be tried.
    """
    mode = delivery_config.mode
    if mode == "none":
        return []

    if chooser is None and delivery_config.save_directory is not None:
        chooser = fixed_directory_chooser(delivery_config.save_directory)

    targets: list[DeliveryTarget] = []
    if mode in ("auto", "save"):
        targets.append(SaveToLocationTarget(chooser, delivery_config.save_directory))
    if mode in ("auto", "share"):
        targets.append(ShareTarget())
    return targets


def select_target(targets: Sequence[DeliveryTarget]) -> DeliveryTarget:
    """Return the first available target.

    Raises:
        DeliveryUnavailableError: If no target is available.
    """
    for target in targets:
        if target.is_available():
            return target
    raise DeliveryUnavailableError(UNAVAILABLE_MESSAGE)


def deliver_file(
    file_path: Path, file_name: str, targets: Sequence[DeliveryTarget]
) -> DeliveryResult:
    """Hand a file to the first available target, falling back on failure.

    A cancellation ends delivery at once without trying other targets. A
    failing target hands over to the next available one, whatever it
    raised, so delivery never turns a written export into an error.

    Args:
        file_path: Path of the written export.
        file_name: File name to present.
        targets: Targets in fallback order.

    Returns:
        DeliveryResult with DELIVERED, CANCELLED or FAILED status.

    Raises:
        DeliveryUnavailableError: If no target is available.
    """
    available = [t for t in targets if t.is_available()]
    if not available:
        raise DeliveryUnavailableError(UNAVAILABLE_MESSAGE)

    last_error: Optional[DeliveryError] = None
    for target in available:
        try:
            return target.deliver(file_path, file_name)
        except DeliveryCancelled as e:
            logger.info(f"Delivery cancelled by user via {target.name}")
            return DeliveryResult(
                status=DeliveryStatus.CANCELLED,
                target=target.name,
                message=str(e) or "Cancelled",
            )
        except DeliveryError as e:
            logger.warning(f"Delivery via {target.name} failed: {e}")
            last_error = e
        except Exception as e:
            # The file already exists; a misbehaving target only fails delivery
            logger.warning(
                f"Delivery via {target.name} raised {type(e).__name__}: {e}",
                exc_info=True,
            )
            last_error = DeliveryError(f"{target.name} failed: {type(e).__name__}: {e}")

    return DeliveryResult(
        status=DeliveryStatus.FAILED,
        target=available[-1].name,
        message=str(last_error) if last_error else "Delivery failed",
    )
