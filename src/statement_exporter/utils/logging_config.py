"""Logging configuration for the statement exporter."""

import logging
import sys
import time
from pathlib import Path

# Default log file name
DEFAULT_LOG_FILE = "statement_exporter.log"

# Context keys that identify a user or their statement; never logged in clear
SENSITIVE_FIELDS = {
    'user_id',
    'statement_id',
    'statement_import_id',
    'statement',
    'merchant',
    'description',
    'account_number',
}

# Log format with timestamp, level, module, and message
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def mask_context(context: dict[str, object]) -> dict[str, object]:
    """Replace the values of user- and statement-identifying keys with '***'."""
    return {k: '***' if k.lower() in SENSITIVE_FIELDS else v for k, v in context.items()}


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
) -> logging.Logger:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Path to log file. If None, uses DEFAULT_LOG_FILE.
        console_output: Whether to also output to stderr.

    Returns:
        The statement_exporter package logger.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("statement_exporter")
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    log_path = Path(log_file or DEFAULT_LOG_FILE)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger nested under the statement_exporter package logger.

    Args:
        name: Module name (typically __name__).
    """
    if name == "statement_exporter" or name.startswith("statement_exporter."):
        return logging.getLogger(name)
    return logging.getLogger(f"statement_exporter.{name}")


class LogContext:
    """Logs one export stage: aggregate, build, serialize, persist or deliver.

    Entering logs the stage with its context at DEBUG level, masking keys
    listed in SENSITIVE_FIELDS. Leaving logs the elapsed time, or the
    exception (with traceback) at ERROR level if the stage raised. The
    exception is never suppressed.

    Example:
        with LogContext(logger, "persist", directory=out_dir, statement=name):
            path = persist(data, name, out_dir)
    """

    def __init__(self, logger: logging.Logger, stage: str, **context: object):
        """Initialize the stage context.

        Args:
            logger: Logger instance to use.
            stage: Name of the export stage.
            **context: Values describing the stage input.
        """
        self.logger = logger
        self.stage = stage
        self.context = context
        self.elapsed: float | None = None
        self._started = 0.0

    def __enter__(self) -> "LogContext":
        context_str = ", ".join(f"{k}={v}" for k, v in mask_context(self.context).items())
        self.logger.debug(f"Starting {self.stage}: {context_str}")
        self._started = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> bool:
        self.elapsed = time.perf_counter() - self._started
        if exc_type is not None:
            self.logger.error(
                f"{self.stage} failed after {self.elapsed * 1000:.1f} ms: "
                f"{exc_type.__name__}: {exc_val}",
                exc_info=True,
            )
        else:
            self.logger.debug(f"Completed {self.stage} in {self.elapsed * 1000:.1f} ms")
        return False
