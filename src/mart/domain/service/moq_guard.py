"""Domain service: minimum order quantity (MOQ) guard.

Submissions are never silently raised to the MOQ, since that would change
the total cost without the buyer's consent. Only interactive steppers clamp,
because there the buyer is the one moving the control.
"""

from __future__ import annotations

from dataclasses import dataclass

from mart.domain.exceptions import BelowMinimumOrder
from mart.domain.model.value_objects import Quantity


@dataclass(frozen=True)
class QuantityCheck:
    """Outcome of a MOQ check.

    ``quantity`` is the requested value when accepted, otherwise the MOQ
    suggested to the caller.
    """

    accepted: bool
    quantity: int


@dataclass(frozen=True)
class QuantityLine:
    """Anything carrying a label, a quantity and its MOQ (e.g. a cart row)."""

    label: str
    quantity: int
    moq: int


def validate_quantity(requested: int, moq: int) -> QuantityCheck:
    Quantity(requested)
    Quantity(moq)
    if requested >= moq:
        return QuantityCheck(accepted=True, quantity=requested)
    return QuantityCheck(accepted=False, quantity=moq)


def require_minimum(requested: int, moq: int) -> int:
    """Validate a final submission; raises ``BelowMinimumOrder`` if short."""
    check = validate_quantity(requested, moq)
    if not check.accepted:
        raise BelowMinimumOrder(requested=requested, suggested=check.quantity)
    return check.quantity


def step_quantity(current: int, delta: int, moq: int) -> int:
    """Move a quantity stepper by *delta*, never going under the MOQ."""
    Quantity(moq)
    return max(moq, current + delta)


def find_below_minimum(lines: list[QuantityLine]) -> list[QuantityLine]:
    return [line for line in lines if line.quantity < line.moq]
