# offerte/rules.py
# Rounding rules. Applied once: hours and quantities at the calculator
# boundary, money when a line or a totals field is produced.

from __future__ import annotations

import math

QUANTITY_DECIMALS = 2


def money(x: float) -> float:
    """Stable currency rounding to cents."""
    return round(float(x) + 1e-9, 2)


def round_to_quarter(hours: float) -> float:
    """Billable hours to the nearest quarter hour, halves rounded up."""
    return math.floor(float(hours) * 4 + 0.5 + 1e-9) / 4


def round_quantity(x: float) -> float:
    """Material and volume quantities."""
    return round(float(x) + 1e-9, QUANTITY_DECIMALS)


def line_total(hoeveelheid: float, prijs_per_eenheid: float) -> float:
    return money(hoeveelheid * prijs_per_eenheid)
