"""Tests for the command-line interface."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from openpyxl import load_workbook

from statement_exporter.cli import (
    EXIT_FAILED,
    EXIT_NOT_DELIVERED,
    EXIT_OK,
    create_parser,
    get_log_level,
    main,
    prompt_for_directory,
)


def create_record(txn_id: str, amount: str, txn_type: str = "expense", **extra: object) -> dict[str, object]:
    """Helper to create a raw data-layer record."""
    record: dict[str, object] = {
        "id": txn_id,
        "amount": amount,
        "type": txn_type,
        "occurred_at": "2024-05-01T10:00:00Z",
    }
    record.update(extra)
    return record


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an isolated directory so the log file and settings stay local."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("STATEMENT_EXPORT_DIR", raising=False)
    return tmp_path


@pytest.fixture
def input_file(workdir: Path) -> Path:
    path = workdir / "transactions.json"
    path.write_text(
        json.dumps([
            create_record("1", "100", category_user={"id": "food", "name": "Food"}),
            create_record("2", "50", category_user={"id": "food", "name": "Food"}),
            create_record("3", "1000", "income", category_user={"id": "pay", "name": "Salary"}),
        ]),
        encoding="utf-8",
    )
    return path


def exported_files(directory: Path) -> list[Path]:
    return sorted(directory.glob("Statement_*.xlsx"))


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self) -> None:
        """Test default option values."""
        args = create_parser().parse_args(["in.json"])

        assert args.input == Path("in.json")
        assert args.deliver is None
        assert args.verbose == 0
        assert not args.strict

    def test_rejects_unknown_delivery_mode(self) -> None:
        """Test that --deliver only accepts known modes."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["in.json", "--deliver", "email"])

    @pytest.mark.parametrize("verbosity,level", [(0, "WARNING"), (1, "INFO"), (2, "DEBUG"), (3, "DEBUG")])
    def test_log_level(self, verbosity: int, level: str) -> None:
        """Test verbosity mapping."""
        assert get_log_level(verbosity) == level


class TestMain:
    """Tests for main function."""

    def test_export_without_delivery(self, workdir: Path, input_file: Path) -> None:
        """Test a plain export to an output directory."""
        out = workdir / "out"
        code = main([str(input_file), "-n", "May 2024.pdf", "-o", str(out), "--deliver", "none"])

        assert code == EXIT_OK
        files = exported_files(out)
        assert len(files) == 1
        assert files[0].name.startswith("Statement_May_2024_pdf_")

        ws = load_workbook(files[0])["Summary"]
        assert ws["B2"].value == 3
        assert ws["B3"].value == 2

    def test_name_defaults_to_input_stem(self, workdir: Path, input_file: Path) -> None:
        """Test the file name when --name is omitted."""
        out = workdir / "out"
        main([str(input_file), "-o", str(out), "--deliver", "none"])

        assert exported_files(out)[0].name.startswith("Statement_transactions_")

    def test_missing_input(self, workdir: Path) -> None:
        """Test a missing input file."""
        assert main([str(workdir / "nope.json"), "--deliver", "none"]) == EXIT_FAILED

    def test_empty_statement(self, workdir: Path) -> None:
        """Test that an empty selection fails without writing a file."""
        path = workdir / "empty.json"
        path.write_text("[]", encoding="utf-8")
        out = workdir / "out"

        assert main([str(path), "-o", str(out), "--deliver", "none"]) == EXIT_FAILED
        assert not out.exists()

    def test_statement_filter_with_no_match(self, workdir: Path, input_file: Path) -> None:
        """Test that filtering everything out is an empty statement."""
        out = workdir / "out"
        code = main([str(input_file), "-o", str(out), "--deliver", "none", "--user-id", "nobody"])

        assert code == EXIT_FAILED

    def test_strict_malformed_record(self, workdir: Path) -> None:
        """Test that --strict aborts on a bad record."""
        path = workdir / "bad.json"
        path.write_text(json.dumps([create_record("1", "5"), {"id": "2"}]), encoding="utf-8")

        assert main([str(path), "--strict", "--deliver", "none", "-o", str(workdir / "o")]) == EXIT_FAILED

    def test_save_delivery(self, workdir: Path, input_file: Path) -> None:
        """Test delivering into a fixed save directory."""
        out = workdir / "out"
        saved = workdir / "saved"
        code = main([
            str(input_file), "-o", str(out), "--deliver", "save", "--save-dir", str(saved),
        ])

        assert code == EXIT_OK
        assert len(exported_files(saved)) == 1

    def test_save_cancelled(self, workdir: Path, input_file: Path) -> None:
        """Test that cancelling the prompt keeps the file and succeeds."""
        out = workdir / "out"
        with patch("statement_exporter.cli.console.input", return_value="cancel"):
            code = main([str(input_file), "-o", str(out), "--deliver", "save"])

        assert code == EXIT_OK
        assert len(exported_files(out)) == 1

    def test_save_prompt_on_closed_stdin(self, workdir: Path, input_file: Path) -> None:
        """Test that end of input at the prompt is a cancel, not a crash."""
        out = workdir / "out"
        with patch("statement_exporter.cli.console.input", side_effect=EOFError):
            code = main([str(input_file), "-o", str(out), "--deliver", "save"])

        assert code == EXIT_OK
        assert len(exported_files(out)) == 1

    def test_save_unavailable(self, workdir: Path, input_file: Path) -> None:
        """Test exit code 2 when no delivery mechanism is usable."""
        out = workdir / "out"
        code = main([str(input_file), "-o", str(out), "--deliver", "save", "--no-interactive"])

        assert code == EXIT_NOT_DELIVERED
        assert len(exported_files(out)) == 1

    def test_verify(self, workdir: Path, input_file: Path) -> None:
        """Test that --verify re-opens the file."""
        out = workdir / "out"
        code = main([str(input_file), "-o", str(out), "--deliver", "none", "--verify"])
        assert code == EXIT_OK

    def test_invalid_config(self, workdir: Path, input_file: Path) -> None:
        """Test that a broken settings file is reported."""
        settings = workdir / "settings.yaml"
        settings.write_text("delivery:\n  mode: carrier-pigeon\n", encoding="utf-8")

        assert main([str(input_file), "--config", str(settings)]) == EXIT_FAILED

    def test_config_file_output_directory(self, workdir: Path, input_file: Path) -> None:
        """Test that the settings file supplies the output directory."""
        settings = workdir / "settings.yaml"
        settings.write_text(
            f"output:\n  directory: {workdir / 'from-config'}\ndelivery:\n  mode: none\n",
            encoding="utf-8",
        )

        assert main([str(input_file), "--config", str(settings)]) == EXIT_OK
        assert len(exported_files(workdir / "from-config")) == 1


class TestPromptForDirectory:
    """Tests for the interactive directory prompt."""

    def test_cancel(self) -> None:
        with patch("statement_exporter.cli.console.input", return_value="cancel"):
            assert prompt_for_directory("f.xlsx", None) is None

    def test_empty_answer_reuses_last(self, tmp_path: Path) -> None:
        with patch("statement_exporter.cli.console.input", return_value=""):
            assert prompt_for_directory("f.xlsx", tmp_path) == tmp_path

    def test_path_answer(self, tmp_path: Path) -> None:
        with patch("statement_exporter.cli.console.input", return_value=str(tmp_path)):
            assert prompt_for_directory("f.xlsx", None) == tmp_path

    @pytest.mark.parametrize("interruption", [EOFError, KeyboardInterrupt])
    def test_interrupted_prompt_cancels(self, interruption: type[BaseException]) -> None:
        with patch("statement_exporter.cli.console.input", side_effect=interruption):
            assert prompt_for_directory("f.xlsx", None) is None
