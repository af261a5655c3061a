from __future__ import annotations

from typing import Iterable, TextIO

from domain.operations import TaxResult

from .formatting import format_currency


def render_tax_line(results: Iterable[TaxResult]) -> str:
    """Render one batch as a compact JSON array, e.g. `[{"tax":0.00},{"tax":10000.00}]`."""
    return "[" + ",".join(f'{{"tax":{format_currency(result.tax)}}}' for result in results) + "]"


def write_tax_lines(results_per_batch: Iterable[Iterable[TaxResult]], stream: TextIO) -> int:
    written = 0
    for results in results_per_batch:
        stream.write(render_tax_line(results))
        stream.write("\n")
        written += 1
    return written
