"""Statement-to-spreadsheet export pipeline.

aggregate -> build -> serialize -> persist -> deliver, strictly in that
order. Each export call owns all of its intermediate state.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from statement_exporter.config import Config
from statement_exporter.delivery.base import DeliveryResult, DeliveryStatus, DeliveryTarget
from statement_exporter.delivery.selector import build_targets, deliver_file
from statement_exporter.errors import DeliveryUnavailableError
from statement_exporter.models.transaction import Transaction
from statement_exporter.output.package_builder import PackageBuilder, PackageParts
from statement_exporter.output.serializer import serialize
from statement_exporter.output.storage import persist
from statement_exporter.processing.aggregator import aggregate
from statement_exporter.utils.logging_config import LogContext, get_logger

logger = get_logger(__name__)


@dataclass
class ExportResult:
    """Outcome of an export.

    Attributes:
        file_path: Where the .xlsx was written.
        file_name: File name presented to the user.
        transaction_count: Number of exported transactions.
        category_count: Number of category groups on the Summary sheet.
        delivery: Delivery outcome, or None if delivery was not attempted.
    """

    file_path: Path
    file_name: str
    transaction_count: int
    category_count: int
    delivery: Optional[DeliveryResult] = None

    @property
    def file_created(self) -> bool:
        return self.file_path.exists()

    @property
    def delivered(self) -> bool:
        """True only if the file reached a save location or share handler."""
        return self.delivery is not None and self.delivery.status is DeliveryStatus.DELIVERED


class StatementExporter:
    """Runs the export pipeline for one statement at a time.

    The exporter itself keeps no per-export state, so one instance can
    serve concurrent calls.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        targets: Optional[Sequence[DeliveryTarget]] = None,
    ):
        """Initialize the exporter.

        Args:
            config: Application configuration (defaults when omitted).
            targets: Delivery targets in fallback order. Built from
                config.delivery when omitted.
        """
        self.config = config or Config()
        if targets is None:
            targets = build_targets(self.config.delivery)
        self.targets = list(targets)
        self.builder = PackageBuilder(
            date_format=self.config.output.date_format,
            decimal_places=self.config.output.decimal_places,
        )

    def build_package(self, transactions: list[Transaction]) -> PackageParts:
        """Aggregate and build the package parts without touching disk.

        Raises:
            EmptyInputError: If there are no transactions.
            BuildError: If the package cannot be assembled.
        """
        with LogContext(logger, "aggregate", transactions=len(transactions)):
            aggregated = aggregate(transactions)
        with LogContext(logger, "build", categories=aggregated.category_count):
            return self.builder.build(transactions, aggregated)

    def create_file(
        self,
        transactions: list[Transaction],
        statement_name: str,
        directory: Optional[Path] = None,
    ) -> ExportResult:
        """Build, serialize and write the export without delivering it.

        Args:
            transactions: Transactions of the statement.
            statement_name: Source statement name, used in the file name.
            directory: Target directory (default: config.output.directory).

        Returns:
            ExportResult with no delivery outcome.

        Raises:
            EmptyInputError, BuildError, SerializeError, PersistError.
        """
        if directory is None:
            directory = self.config.output.directory

        package = self.build_package(transactions)
        with LogContext(logger, "serialize", parts=len(package)):
            data = serialize(package)
        with LogContext(logger, "persist", directory=directory, statement=statement_name):
            file_path = persist(data, statement_name, directory)

        return ExportResult(
            file_path=file_path,
            file_name=file_path.name,
            transaction_count=len(transactions),
            category_count=package.category_count,
        )

    def deliver(self, result: ExportResult) -> DeliveryResult:
        """Hand a created file to the user.

        Never raises for delivery problems; they are reported in the
        returned DeliveryResult so the created file stays usable.
        """
        try:
            delivery = deliver_file(result.file_path, result.file_name, self.targets)
        except DeliveryUnavailableError as e:
            logger.warning(f"No delivery mechanism available: {e}")
            delivery = DeliveryResult(status=DeliveryStatus.UNAVAILABLE, message=str(e))
        result.delivery = delivery
        return delivery

    def export(
        self,
        transactions: list[Transaction],
        statement_name: str,
        deliver: bool = True,
        directory: Optional[Path] = None,
    ) -> ExportResult:
        """Run the whole pipeline.

        Args:
            transactions: Transactions of the statement.
            statement_name: Source statement name, used in the file name.
            deliver: Whether to hand the file to a delivery target.
            directory: Target directory (default: config.output.directory).

        Returns:
            ExportResult. A cancelled or failed delivery still returns the
            created file, with the delivery outcome attached.

        Raises:
            EmptyInputError: If there are no transactions.
            BuildError: If the package cannot be assembled.
            SerializeError: If the archive cannot be built.
            PersistError: If the file cannot be written.
        """
        logger.info(
            f"Exporting statement '{statement_name}' ({len(transactions)} transactions)"
        )
        result = self.create_file(transactions, statement_name, directory)

        if deliver and self.targets:
            with LogContext(logger, "deliver", file=result.file_name):
                self.deliver(result)

        logger.info(
            f"Export finished: {result.file_path} "
            f"(delivery: {result.delivery.status.value if result.delivery else 'skipped'})"
        )
        return result


def export_statement(
    transactions: list[Transaction],
    statement_name: str,
    config: Optional[Config] = None,
    targets: Optional[Sequence[DeliveryTarget]] = None,
    deliver: bool = True,
) -> ExportResult:
    """Export one statement's transactions to an .xlsx file.

    See StatementExporter.export().
    """
    exporter = StatementExporter(config, targets)
    return exporter.export(transactions, statement_name, deliver=deliver)


async def export_statement_async(
    transactions: list[Transaction],
    statement_name: str,
    config: Optional[Config] = None,
    targets: Optional[Sequence[DeliveryTarget]] = None,
    deliver: bool = True,
) -> ExportResult:
    """Run export_statement() in a worker thread.

    Keeps a host event loop responsive while the archive is compressed
    and written.
    """
    return await asyncio.to_thread(
        export_statement,
        list(transactions),
        statement_name,
        config,
        targets,
        deliver,
    )
