"""
Quantity rules per selling unit.

Discrete units (rolls, pieces, full pagne sets, bands) sell in whole numbers
starting at 1. Continuous units (metres, yards) sell in steps of
``settings.continuous_unit_step`` starting at one step.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable

from ..errors import InvalidQuantity, UnknownUnit
from ..settings import settings

DISCRETE_UNITS = ("rouleau", "pièce", "complet", "bande")
CONTINUOUS_UNITS = ("mètre", "yard", "yards")
KNOWN_UNITS = DISCRETE_UNITS + CONTINUOUS_UNITS

# unit for products that carry no metadata at all
DEFAULT_UNIT = "pièce"

ONE = Decimal("1")
ZERO = Decimal("0")


@dataclass(frozen=True)
class UnitRule:
    unit: str
    step: Decimal
    minimum: Decimal

    @property
    def discrete(self) -> bool:
        return self.unit in DISCRETE_UNITS


def rule_for(unit: str) -> UnitRule:
    if unit in DISCRETE_UNITS:
        return UnitRule(unit, ONE, ONE)
    if unit in CONTINUOUS_UNITS:
        step = Decimal(settings.continuous_unit_step)
        return UnitRule(unit, step, step)
    raise UnknownUnit(f"unknown unit: {unit!r}")


def to_decimal(value: Any) -> Decimal:
    """Coerce a JSON-ish number to Decimal without binary float noise."""
    if isinstance(value, bool):
        raise InvalidQuantity(f"not a number: {value!r}")
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidQuantity(f"not a number: {value!r}")
    if not d.is_finite():
        raise InvalidQuantity(f"not a finite number: {value!r}")
    return d


def check_quantity(unit: str, quantity: Any) -> Decimal:
    """Reject quantities under the unit minimum or off the unit step."""
    rule = rule_for(unit)
    q = to_decimal(quantity)
    if q < rule.minimum:
        raise InvalidQuantity(f"minimum quantity for {unit} is {rule.minimum}")
    if q % rule.step != ZERO:
        raise InvalidQuantity(f"quantity for {unit} must be a multiple of {rule.step}")
    return q


def floor_quantity(unit: str, quantity: Any) -> Decimal:
    """Round to the unit step (half up) and never go below the unit minimum."""
    rule = rule_for(unit)
    q = to_decimal(quantity)
    steps = (q / rule.step).to_integral_value(rounding=ROUND_HALF_UP)
    return max(steps * rule.step, rule.minimum)


def line_total(price: Decimal, quantity: Decimal) -> Decimal:
    return price * quantity


def order_total(lines: Iterable[Any]) -> Decimal:
    """Sum of price * quantity over anything with those two attributes."""
    return sum((line_total(l.price, l.quantity) for l in lines), ZERO)
