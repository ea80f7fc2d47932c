"""Command-line interface for the statement exporter."""

import argparse
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console

from statement_exporter import __version__
from statement_exporter.config import DELIVERY_MODES, Config, ConfigError, load_config
from statement_exporter.delivery.base import DeliveryStatus
from statement_exporter.delivery.save_target import DirectoryChooser
from statement_exporter.delivery.selector import build_targets
from statement_exporter.errors import EmptyInputError, ExportError
from statement_exporter.exporter import ExportResult, StatementExporter
from statement_exporter.output.verify import VerificationError, verify_package
from statement_exporter.sources.json_source import SourceError, load_transactions
from statement_exporter.utils.logging_config import get_logger, setup_logging

# Load environment variables from .env file (if it exists)
load_dotenv()

console = Console()
logger = get_logger(__name__)

# Exit codes
EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NOT_DELIVERED = 2


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="statement-exporter",
        description="Export a bank statement's transactions to an .xlsx workbook",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s transactions.json --name "May 2024.pdf"
  %(prog)s export.json --statement-id 42 --user-id u1 -o ./exports --deliver none
  %(prog)s transactions.json --deliver save --save-dir ~/Downloads --verify
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "input",
        type=Path,
        help="JSON file with transaction records",
    )

    parser.add_argument(
        "-n", "--name",
        default=None,
        help="Source statement name used in the file name (default: input file stem)",
    )

    parser.add_argument(
        "-o", "--output-dir",
        type=Path,
        default=None,
        help="Directory for the .xlsx file (default: from config)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to settings.yaml (default: config/settings.yaml)",
    )

    # Statement selection
    parser.add_argument(
        "--user-id",
        default=None,
        help="Only export transactions owned by this user",
    )

    parser.add_argument(
        "--statement-id",
        default=None,
        help="Only export transactions linked to this statement import",
    )

    # Output options
    parser.add_argument(
        "--date-format",
        default=None,
        help="strftime pattern for the Date column (default: %%m/%%d/%%Y)",
    )

    parser.add_argument(
        "--deliver",
        choices=DELIVERY_MODES,
        default=None,
        help="How to hand over the file: auto, save, share or none",
    )

    parser.add_argument(
        "--save-dir",
        type=Path,
        default=None,
        help="Destination directory for --deliver save (skips the prompt)",
    )

    parser.add_argument(
        "--no-interactive",
        action="store_true",
        help="Never prompt for a save location",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Abort on the first malformed record instead of skipping it",
    )

    parser.add_argument(
        "--verify",
        action="store_true",
        help="Re-open the written file with openpyxl and report its sheets",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (-v, -vv)",
    )

    return parser


def get_log_level(verbosity: int) -> str:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags.

    Returns:
        Log level string.
    """
    if verbosity >= 2:
        return "DEBUG"
    elif verbosity >= 1:
        return "INFO"
    else:
        return "WARNING"


def prompt_for_directory(file_name: str, last_directory: Optional[Path]) -> Optional[Path]:
    """Ask the user where to save the export.

    Args:
        file_name: Name of the file being saved.
        last_directory: Previously used directory, offered as default.

    Returns:
        Chosen directory, or None if the user cancels.
    """
    console.print(f"\n[bold]Save {file_name}[/bold]")
    default_hint = f" [{last_directory}]" if last_directory else ""
    try:
        response = console.input(
            f"Directory{default_hint} (or 'cancel'): "
        ).strip()
    except (EOFError, KeyboardInterrupt):
        # No terminal to answer (stdin closed) or Ctrl+C: same as cancel
        console.print()
        return None

    if response.lower() in ("cancel", "skip", "q"):
        return None
    if not response:
        return last_directory
    return Path(response).expanduser()


def apply_overrides(args: argparse.Namespace, config: Config) -> None:
    """Apply command-line overrides to the loaded configuration."""
    if args.output_dir is not None:
        config.output.directory = args.output_dir
    if args.date_format:
        config.output.date_format = args.date_format
    if args.deliver:
        config.delivery.mode = args.deliver
    if args.save_dir is not None:
        config.delivery.save_directory = args.save_dir.expanduser()


def display_result(result: ExportResult) -> None:
    """Print what was exported and where it went."""
    console.print("\n[bold]Export Summary[/bold]")
    console.print(f"  Transactions: {result.transaction_count}")
    console.print(f"  Categories: {result.category_count}")
    console.print(f"  File: {result.file_path}")

    delivery = result.delivery
    if delivery is None:
        console.print("  Delivery: [dim]skipped[/dim]")
    elif delivery.status is DeliveryStatus.DELIVERED:
        console.print(f"  Delivery: [green]{delivery.message}[/green]")
    elif delivery.status is DeliveryStatus.CANCELLED:
        console.print("  Delivery: [yellow]cancelled, file kept[/yellow]")
    else:
        console.print(f"  Delivery: [red]{delivery.status.value}: {delivery.message}[/red]")


def display_verification(file_path: Path) -> bool:
    """Re-open the file and print its sheets. Returns False on failure."""
    try:
        report = verify_package(file_path)
    except VerificationError as e:
        console.print(f"[red]Verification failed: {e}[/red]")
        return False

    console.print("\n[bold]Verification[/bold]")
    for name in report.sheet_names:
        console.print(
            f"  [green]✓[/green] {name}: {report.row_counts[name]} rows, "
            f"{report.column_counts[name]} columns"
        )
    return True


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, 1 for errors, 2 if the file was created
        but could not be delivered).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return EXIT_FAILED

    log_level = get_log_level(args.verbose)
    setup_logging(level=log_level, log_file=config.logging.file, console_output=args.verbose > 0)

    apply_overrides(args, config)

    if not args.input.is_file():
        console.print(f"[red]Error: Input file not found: {args.input}[/red]")
        return EXIT_FAILED

    statement_name = args.name or args.input.stem

    console.print(f"[bold]Statement Exporter v{__version__}[/bold]\n")
    console.print(f"Input file: {args.input}")
    console.print(f"Output directory: {config.output.directory}")

    try:
        transactions = load_transactions(
            args.input,
            user_id=args.user_id,
            statement_id=args.statement_id,
            strict=args.strict,
        )
    except SourceError as e:
        console.print(f"[red]Error: {e}[/red]")
        return EXIT_FAILED

    chooser: Optional[DirectoryChooser] = None
    if not args.no_interactive and config.delivery.save_directory is None:
        chooser = prompt_for_directory

    exporter = StatementExporter(config, build_targets(config.delivery, chooser))

    try:
        with console.status("Building spreadsheet..."):
            result = exporter.create_file(transactions, statement_name)
    except EmptyInputError as e:
        console.print(f"[yellow]{e}[/yellow]")
        return EXIT_FAILED
    except ExportError as e:
        console.print(f"[red]Export failed ({e.stage}): {e}[/red]")
        logger.error(f"Export failed at {e.stage}: {e}")
        return EXIT_FAILED

    if exporter.targets:
        exporter.deliver(result)

    display_result(result)

    if args.verify and not display_verification(result.file_path):
        return EXIT_FAILED

    if result.delivery is not None and not result.delivery.ok:
        return EXIT_NOT_DELIVERED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
