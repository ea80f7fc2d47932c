"""Hand-off of finished exports to the platform."""

from statement_exporter.delivery.base import DeliveryResult, DeliveryStatus, DeliveryTarget
from statement_exporter.delivery.save_target import SaveToLocationTarget, fixed_directory_chooser
from statement_exporter.delivery.selector import build_targets, deliver_file, select_target
from statement_exporter.delivery.share_target import ShareTarget

__all__ = [
    "DeliveryResult",
    "DeliveryStatus",
    "DeliveryTarget",
    "SaveToLocationTarget",
    "ShareTarget",
    "build_targets",
    "deliver_file",
    "fixed_directory_chooser",
    "select_target",
]
