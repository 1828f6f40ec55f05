"""Tests for unit rules and quantity arithmetic."""
from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

import pytest

from bazar.errors import InvalidQuantity, UnknownUnit
from bazar.services.units import (
    check_quantity,
    floor_quantity,
    order_total,
    rule_for,
    to_decimal,
)


# ---------- Rules ----------

@pytest.mark.parametrize("unit", ["rouleau", "pièce", "complet", "bande"])
def test_discrete_units_step_by_one(unit):
    """Discrete units sell in whole numbers starting at 1."""
    rule = rule_for(unit)
    assert rule.discrete
    assert rule.step == Decimal("1")
    assert rule.minimum == Decimal("1")


@pytest.mark.parametrize("unit", ["mètre", "yard", "yards"])
def test_continuous_units_use_configured_step(unit):
    rule = rule_for(unit)
    assert not rule.discrete
    assert rule.step == Decimal("0.1")
    assert rule.minimum == Decimal("0.1")


def test_unknown_unit_rejected():
    with pytest.raises(UnknownUnit):
        rule_for("kilo")


# ---------- Validation on add ----------

def test_check_quantity_accepts_on_step_values():
    assert check_quantity("mètre", "2.5") == Decimal("2.5")
    assert check_quantity("pièce", 3) == Decimal("3")


@pytest.mark.parametrize(
    "unit,quantity",
    [("mètre", "0.05"), ("mètre", "1.25"), ("rouleau", "1.5"), ("pièce", 0), ("bande", -2)],
)
def test_check_quantity_rejects_below_minimum_or_off_step(unit, quantity):
    with pytest.raises(InvalidQuantity):
        check_quantity(unit, quantity)


# ---------- Floor on update ----------

def test_floor_quantity_clamps_continuous_to_one_step():
    """A metre line never drops below 0.1, whatever the client sends."""
    assert floor_quantity("mètre", "0.04") == Decimal("0.1")
    assert floor_quantity("mètre", -5) == Decimal("0.1")
    assert floor_quantity("yards", 0) == Decimal("0.1")


def test_floor_quantity_rounds_to_step():
    assert floor_quantity("mètre", "2.25") == Decimal("2.3")
    assert floor_quantity("mètre", "2.24") == Decimal("2.2")
    assert floor_quantity("pièce", "2.6") == Decimal("3")
    assert floor_quantity("rouleau", 0) == Decimal("1")


# ---------- Numbers ----------

def test_to_decimal_keeps_float_as_written():
    assert to_decimal(0.1) == Decimal("0.1")


@pytest.mark.parametrize("value", [True, "abc", "NaN", "Infinity"])
def test_to_decimal_rejects_non_numbers(value):
    with pytest.raises(InvalidQuantity):
        to_decimal(value)


def test_order_total_sums_fractional_lines():
    lines = [
        SimpleNamespace(price=Decimal("1000"), quantity=Decimal("2.5")),
        SimpleNamespace(price=Decimal("3500"), quantity=Decimal("2")),
    ]
    assert order_total(lines) == Decimal("9500")
    assert order_total([]) == Decimal("0")
