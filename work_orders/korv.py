"""
Korv arithmetic.

A korv is the unit of machine capacity used for planning: one korv is five
minutes of machine time. Every value is rounded half-up to two decimals.
"""
from decimal import Decimal, ROUND_HALF_UP

MINUTES_PER_KORV = Decimal("5")
TWO_PLACES = Decimal("0.01")


def _decimal(value) -> Decimal:
    if value in (None, ""):
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _round(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def minutes_to_korv(minutes) -> Decimal:
    return _round(_decimal(minutes) / MINUTES_PER_KORV)


def korv_to_minutes(korv) -> Decimal:
    return _decimal(korv) * MINUTES_PER_KORV


def calculate_korv_per_unit(cnc_time=0, cylindrical_time=0, tc_time=0) -> Decimal:
    """Korv for one unit from its CNC, cylindrical and T&C minutes."""
    total_minutes = _decimal(cnc_time) + _decimal(cylindrical_time) + _decimal(tc_time)
    return minutes_to_korv(total_minutes)


def calculate_total_korv(korv_per_unit, quantity) -> Decimal:
    return _round(_decimal(korv_per_unit) * _decimal(quantity))
