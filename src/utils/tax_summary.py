from __future__ import annotations

import sys
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence, TextIO

from domain.operations import Batch, OperationKind
from domain.tax_calculator import BatchResult

from .formatting import format_currency, format_decimal, round_currency


@dataclass
class BatchTaxSummary:
    batch_number: int
    operations: int
    buys: int
    sells: int
    taxable_sells: int
    total_tax: Decimal
    carried_loss: Decimal
    held_quantity: int
    average_cost: Decimal


def compute_batch_summaries(batches: Sequence[Batch], results: Sequence[BatchResult]) -> list[BatchTaxSummary]:
    """Summarize each batch from its operations and the calculator's result."""
    if len(batches) != len(results):
        msg = f"Got {len(results)} results for {len(batches)} batches"
        raise ValueError(msg)

    summaries: list[BatchTaxSummary] = []
    for number, (operations, result) in enumerate(zip(batches, results), start=1):
        # Rounded per sale, matching the emitted amounts.
        rounded_taxes = [round_currency(tax.tax) for tax in result.taxes]
        position = result.position
        summaries.append(
            BatchTaxSummary(
                batch_number=number,
                operations=len(operations),
                buys=sum(1 for op in operations if op.kind == OperationKind.BUY),
                sells=sum(1 for op in operations if op.kind == OperationKind.SELL),
                taxable_sells=sum(1 for tax in rounded_taxes if tax > 0),
                total_tax=sum(rounded_taxes, start=Decimal("0")),
                carried_loss=position.carried_loss,
                held_quantity=position.held_quantity,
                average_cost=position.weighted_average_cost if position.held_quantity > 0 else Decimal("0"),
            )
        )
    return summaries


def render_batch_summaries(summaries: Iterable[BatchTaxSummary], stream: TextIO | None = None) -> None:
    out = stream if stream is not None else sys.stderr
    rows_in = list(summaries)
    print("Tax per batch:", file=out)
    if not rows_in:
        print("  (no batches)", file=out)
        return

    rows: list[tuple[str, ...]] = [
        (
            str(row.batch_number),
            str(row.operations),
            str(row.buys),
            str(row.sells),
            str(row.taxable_sells),
            format_currency(row.total_tax),
            format_currency(row.carried_loss),
            str(row.held_quantity),
            format_decimal(row.average_cost),
        )
        for row in rows_in
    ]
    rows.append(
        (
            "Total",
            str(sum(row.operations for row in rows_in)),
            str(sum(row.buys for row in rows_in)),
            str(sum(row.sells for row in rows_in)),
            str(sum(row.taxable_sells for row in rows_in)),
            format_currency(sum((row.total_tax for row in rows_in), start=Decimal("0"))),
            "",
            "",
            "",
        )
    )

    labels = ("Batch", "Ops", "Buys", "Sells", "Taxed", "Tax", "Carried loss", "Held", "Avg cost")
    widths = [max(len(label), max(len(row[idx]) for row in rows)) for idx, label in enumerate(labels)]

    header = " ".join(
        f"{label:<{width}}" if idx == 0 else f"{label:>{width}}" for idx, (label, width) in enumerate(zip(labels, widths))
    )
    lines = [header, "-" * len(header)]
    for row in rows:
        lines.append(
            " ".join(
                f"{cell:<{width}}" if idx == 0 else f"{cell:>{width}}" for idx, (cell, width) in enumerate(zip(row, widths))
            )
        )

    print("\n".join(lines), file=out)

