"""Tests for logging setup and export stage logging."""

import logging
from pathlib import Path

import pytest

from statement_exporter.utils.logging_config import (
    LogContext,
    get_logger,
    mask_context,
    setup_logging,
)


@pytest.fixture
def package_logger():
    """Package logger with handlers restored after the test."""
    logger = logging.getLogger("statement_exporter")
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestMaskContext:
    """Tests for masking user and statement identifiers."""

    def test_identifiers_masked(self) -> None:
        masked = mask_context({"user_id": "u-42", "statement": "Jane May.pdf", "parts": 5})
        assert masked == {"user_id": "***", "statement": "***", "parts": 5}

    def test_key_match_ignores_case(self) -> None:
        assert mask_context({"Merchant": "Corner Cafe"}) == {"Merchant": "***"}


class TestGetLogger:
    """Tests for module logger naming."""

    def test_package_modules_keep_their_name(self) -> None:
        assert get_logger("statement_exporter.output.storage").name == (
            "statement_exporter.output.storage"
        )

    def test_other_names_nested_under_package(self) -> None:
        assert get_logger("scripts.backfill").name == "statement_exporter.scripts.backfill"


class TestSetupLogging:
    """Tests for handler configuration."""

    def test_writes_to_log_file(self, tmp_path: Path, package_logger: logging.Logger) -> None:
        log_file = tmp_path / "logs" / "export.log"
        setup_logging(level="INFO", log_file=str(log_file), console_output=False)

        get_logger("statement_exporter.exporter").info("Export finished")
        for handler in package_logger.handlers:
            handler.flush()

        assert "statement_exporter.exporter - INFO - Export finished" in log_file.read_text()
        assert len(package_logger.handlers) == 1

    def test_console_handler_added(self, tmp_path: Path, package_logger: logging.Logger) -> None:
        setup_logging(level="debug", log_file=str(tmp_path / "x.log"), console_output=True)

        assert len(package_logger.handlers) == 2
        assert package_logger.level == logging.DEBUG


class TestLogContext:
    """Tests for export stage logging."""

    def test_stage_start_masks_identifiers(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("statement_exporter.exporter")
        with caplog.at_level(logging.DEBUG, logger="statement_exporter"):
            with LogContext(logger, "persist", directory="/tmp/out", statement="Jane May.pdf"):
                pass

        assert "Starting persist: directory=/tmp/out, statement=***" in caplog.text
        assert "Jane May.pdf" not in caplog.text
        assert "Completed persist in" in caplog.text

    def test_elapsed_recorded(self) -> None:
        with LogContext(get_logger("statement_exporter.exporter"), "build") as stage:
            pass
        assert stage.elapsed is not None
        assert stage.elapsed >= 0

    def test_failure_logged_and_reraised(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("statement_exporter.exporter")
        with caplog.at_level(logging.DEBUG, logger="statement_exporter"):
            with pytest.raises(ValueError, match="bad amount"):
                with LogContext(logger, "build"):
                    raise ValueError("bad amount")

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "build failed after" in errors[0].getMessage()
        assert "ValueError: bad amount" in errors[0].getMessage()
        assert errors[0].exc_info is not None
