from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Sequence

from .operations import Operation, OperationKind, TaxResult

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE = Decimal("0.20")
DEFAULT_EXEMPTION_THRESHOLD = Decimal("20000")

ZERO = Decimal("0")


@dataclass
class PositionState:
    held_quantity: int = 0
    weighted_average_cost: Decimal = ZERO
    carried_loss: Decimal = ZERO

    def apply_buy(self, unit_cost: Decimal, quantity: int) -> None:
        self.weighted_average_cost = weighted_average(
            self.held_quantity, self.weighted_average_cost, unit_cost, quantity
        )
        self.held_quantity += quantity

    def apply_sell(self, unit_cost: Decimal, quantity: int) -> Decimal:
        """Reduce holdings and return the gain left after offsetting carried loss.

        Losses are added to `carried_loss` and reported as zero gain.
        """
        raw_result = (unit_cost - self.weighted_average_cost) * quantity
        self.held_quantity -= quantity

        if raw_result < 0:
            self.carried_loss += -raw_result
            return ZERO

        if self.carried_loss >= raw_result:
            self.carried_loss -= raw_result
            return ZERO

        raw_result -= self.carried_loss
        self.carried_loss = ZERO
        return raw_result


@dataclass
class BatchResult:
    taxes: list[TaxResult] = field(default_factory=list)
    position: PositionState = field(default_factory=PositionState)


def weighted_average(
    held_quantity: int, average_cost: Decimal, unit_cost: Decimal, quantity: int
) -> Decimal:
    total_quantity = held_quantity + quantity
    if total_quantity == 0:
        return ZERO
    return (held_quantity * average_cost + quantity * unit_cost) / total_quantity


class TaxCalculator:
    """Compute capital-gains tax for batches of buy/sell operations.

    Each batch is an independent position that starts empty. Cost basis is the
    weighted average purchase price, losses are carried forward within the
    batch, and a sale is taxed only when its gross value exceeds the exemption
    threshold.
    """

    def __init__(
        self,
        *,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
        exemption_threshold: Decimal = DEFAULT_EXEMPTION_THRESHOLD,
    ) -> None:
        self._tax_rate = tax_rate
        self._exemption_threshold = exemption_threshold

    def compute(self, batches: Iterable[Sequence[Operation]]) -> list[list[TaxResult]]:
        return [self.process_batch(batch).taxes for batch in batches]

    def process_batch(self, operations: Sequence[Operation]) -> BatchResult:
        result = BatchResult()
        position = result.position

        for index, operation in enumerate(operations):
            if operation.kind == OperationKind.BUY:
                position.apply_buy(operation.unit_cost, operation.quantity)
                result.taxes.append(TaxResult(tax=ZERO))
            elif operation.kind == OperationKind.SELL:
                if operation.quantity > position.held_quantity:
                    logger.warning(
                        "Sell of %d units at index %d exceeds held quantity %d",
                        operation.quantity,
                        index,
                        position.held_quantity,
                    )
                gain = position.apply_sell(operation.unit_cost, operation.quantity)
                result.taxes.append(TaxResult(tax=self._tax_for_sale(operation, gain)))
            else:
                raise ValueError(f"Unsupported operation kind {operation.kind!r}")

            logger.debug(
                "op=%d kind=%s held=%d average=%s carried_loss=%s",
                index,
                operation.kind,
                position.held_quantity,
                position.weighted_average_cost,
                position.carried_loss,
            )

        return result

    def _tax_for_sale(self, operation: Operation, gain: Decimal) -> Decimal:
        if operation.gross_value > self._exemption_threshold and gain > 0:
            return gain * self._tax_rate
        return ZERO
