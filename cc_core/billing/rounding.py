# cc_core/billing/rounding.py
"""
Currency-aware rounding primitives.

Everything works on Decimal. Floats are converted through str() first, so
0.1 + 0.2 style representation error never reaches a rounding boundary.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal, InvalidOperation

WHOLE_UNIT_CURRENCIES = ("KHR",)
DECIMAL_CURRENCIES = ("USD",)

KHR_INCREMENTS = {
    "nearest_1": Decimal("1"),
    "nearest_10": Decimal("10"),
    "nearest_50": Decimal("50"),
    "nearest_100": Decimal("100"),
}

MODE_HALF_UP = "half-up"
MODE_HALF_EVEN = "half-even"
MODE_FLOOR = "floor"

_DECIMAL_ROUNDING = {
    MODE_HALF_UP: ROUND_HALF_UP,
    MODE_HALF_EVEN: ROUND_HALF_EVEN,
    MODE_FLOOR: ROUND_FLOOR,
}

ZERO = Decimal("0")
CENT = Decimal("0.01")


@dataclass(frozen=True)
class RoundingConfig:
    mode: str = MODE_HALF_UP
    khr_mode: str = "nearest_100"
    usd_decimals: int = 2


def to_decimal(value) -> Decimal:
    """None/garbage become 0; never raises."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return ZERO
    return d if d.is_finite() else ZERO


def _quantum(decimals: int) -> Decimal:
    return Decimal(1).scaleb(-max(0, int(decimals)))


def round_half_up(value, decimals: int = 2) -> Decimal:
    return to_decimal(value).quantize(_quantum(decimals), rounding=ROUND_HALF_UP)


def round_half_even(value, decimals: int = 2) -> Decimal:
    return to_decimal(value).quantize(_quantum(decimals), rounding=ROUND_HALF_EVEN)


def round_floor(value, decimals: int = 2) -> Decimal:
    return to_decimal(value).quantize(_quantum(decimals), rounding=ROUND_FLOOR)


def round_to_increment(value, increment: Decimal) -> Decimal:
    """Half-up on value/increment, then scale back (149 -> 100, 150 -> 200 for 100)."""
    steps = (to_decimal(value) / increment).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return steps * increment


def apply_rounding(amount, currency: str | None, config: RoundingConfig | None = None) -> Decimal:
    config = config or RoundingConfig()
    code = (currency or "").strip().upper()

    if code in WHOLE_UNIT_CURRENCIES:
        increment = KHR_INCREMENTS.get(config.khr_mode, KHR_INCREMENTS["nearest_100"])
        return round_to_increment(amount, increment)

    if code in DECIMAL_CURRENCIES:
        rounding = _DECIMAL_ROUNDING.get(config.mode, ROUND_HALF_UP)
        return to_decimal(amount).quantize(_quantum(config.usd_decimals), rounding=rounding)

    # unknown currency: plain 2-decimal half-up
    return round_half_up(amount, 2)
