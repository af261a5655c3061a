from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import BinaryIO, Sequence, TextIO

from config import LOG_LEVELS, AppSettings, config
from domain.operations import Batch
from domain.tax_calculator import TaxCalculator
from importers.operations_reader import OperationsReadError, load_batches, read_batches
from utils.tax_output import write_tax_lines
from utils.tax_summary import compute_batch_summaries, render_batch_summaries

logger = logging.getLogger(__name__)


def build_calculator(settings: AppSettings) -> TaxCalculator:
    return TaxCalculator(tax_rate=settings.tax_rate, exemption_threshold=settings.exemption_threshold)


def run(
    input_path: Path | None,
    *,
    settings: AppSettings,
    summary: bool = False,
    stdin: BinaryIO | TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    batches: list[Batch]
    if input_path is None:
        batches = read_batches(stdin if stdin is not None else sys.stdin.buffer)
    else:
        batches = load_batches(input_path)

    calculator = build_calculator(settings)
    results = [calculator.process_batch(batch) for batch in batches]

    written = write_tax_lines((result.taxes for result in results), stdout if stdout is not None else sys.stdout)
    logger.info("Wrote tax results for %d batches", written)

    if summary:
        render_batch_summaries(compute_batch_summaries(batches, results))
    return written


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Compute capital-gains tax for line-delimited JSON batches of stock operations."
    )
    parser.add_argument("input", type=Path, nargs="?", help="Operations file (defaults to standard input)")
    parser.add_argument("--summary", action="store_true", help="Print a per-batch tax summary to stderr")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Override the configured log level",
    )
    args = parser.parse_args(argv)

    settings = config()
    logging.basicConfig(
        level=args.log_level or settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )

    try:
        run(args.input, settings=settings, summary=args.summary)
    except OperationsReadError as exc:
        print(exc, file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
