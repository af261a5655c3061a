from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def format_decimal(value: Decimal) -> str:
    quantized = value.normalize()
    # Avoid scientific notation for integers.
    if quantized == quantized.to_integral():
        return f"{quantized:.0f}"
    return format(quantized, "f")


def round_currency(value: Decimal) -> Decimal:
    """Quantize to cents, rounding halves away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(value: Decimal) -> str:
    return f"{round_currency(value):.2f}"
