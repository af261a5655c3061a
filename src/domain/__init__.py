"""Domain models and tax rules for the stock gains tax calculator.

Operations are Pydantic models decoded from the input format; the calculator
folds each batch of operations over a mutable position state.
"""

__all__ = [
    "operations",
    "tax_calculator",
]
