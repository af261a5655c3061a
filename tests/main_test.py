from __future__ import annotations

import io
from decimal import Decimal
from pathlib import Path

import pytest

from config import AppSettings
from main import main, run

INPUT = (
    '[{"operation":"buy", "unit-cost":10.00, "quantity": 100},{"operation":"sell", "unit-cost":15.00, "quantity": 50},'
    '{"operation":"sell", "unit-cost":15.00, "quantity": 50}]\n'
    "\n"
    "this line is not json\n"
    '[{"operation":"buy", "unit-cost":10.00, "quantity": 10000},{"operation":"sell", "unit-cost":20.00, "quantity": 5000},'
    '{"operation":"sell", "unit-cost":5.00, "quantity": 5000}]\n'
    "[]\n"
)

EXPECTED_OUTPUT = (
    '[{"tax":0.00},{"tax":0.00},{"tax":0.00}]\n'
    '[{"tax":0.00},{"tax":10000.00},{"tax":0.00}]\n'
    "[]\n"
)


def test_run_reads_stdin_and_writes_results() -> None:
    stdout = io.StringIO()

    written = run(None, settings=AppSettings(), stdin=io.StringIO(INPUT), stdout=stdout)

    assert written == 3
    assert stdout.getvalue() == EXPECTED_OUTPUT


def test_run_uses_configured_rate() -> None:
    stdout = io.StringIO()
    settings = AppSettings(tax_rate=Decimal("0.10"), exemption_threshold=Decimal("0"))

    run(None, settings=settings, stdin=io.StringIO(INPUT), stdout=stdout)

    assert stdout.getvalue().splitlines()[0] == '[{"tax":0.00},{"tax":25.00},{"tax":25.00}]'


def test_main_reads_file_argument(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "input.jsonl"
    path.write_text(INPUT, encoding="utf-8")

    main([str(path), "--summary"])

    captured = capsys.readouterr()
    assert captured.out == EXPECTED_OUTPUT
    assert "Tax per batch:" in captured.err


def test_run_reads_binary_stdin() -> None:
    stdout = io.StringIO()
    stdin = io.BytesIO(b"[]\n\xff\xfe\n" + INPUT.encode("utf-8"))

    written = run(None, settings=AppSettings(), stdin=stdin, stdout=stdout)

    assert written == 4
    assert stdout.getvalue() == "[]\n" + EXPECTED_OUTPUT


def test_main_rejects_unknown_log_level(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--log-level", "basic_format"])

    assert exc_info.value.code == 2
    assert "invalid choice" in capsys.readouterr().err


def test_main_exits_on_read_failure(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main([str(tmp_path / "missing.jsonl")])

    assert exc_info.value.code == 1
    assert "cannot open operations file" in capsys.readouterr().err
