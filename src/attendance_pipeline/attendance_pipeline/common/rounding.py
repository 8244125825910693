from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a human would (0.5 always goes up), unlike builtin round()."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percent(numerator: int, denominator: int) -> int:
    """Whole-number percentage; 0 when there is nothing to divide by."""
    if denominator <= 0:
        return 0
    return int(round_half_up(100 * numerator / denominator))


def percent2(numerator: int, denominator: int) -> float:
    """Percentage with two decimals; 0.0 when there is nothing to divide by."""
    if denominator <= 0:
        return 0.0
    return round_half_up(100 * numerator / denominator, 2)


def as_percent_label(score: float) -> int:
    """0.934 -> 93"""
    return int(round_half_up(score * 100))
