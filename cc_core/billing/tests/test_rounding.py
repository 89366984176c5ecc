# cc_core/billing/tests/test_rounding.py
from decimal import Decimal

import pytest

from cc_core.billing.rounding import (
    RoundingConfig,
    apply_rounding,
    round_floor,
    round_half_even,
    round_half_up,
    round_to_increment,
    to_decimal,
)


@pytest.mark.parametrize(
    "amount,expected",
    [
        (149, Decimal("100")),
        (150, Decimal("200")),
        (Decimal("93.95"), Decimal("100")),
        (Decimal("49.99"), Decimal("0")),
        (0, Decimal("0")),
    ],
)
def test_khr_nearest_100(amount, expected):
    assert apply_rounding(amount, "KHR", RoundingConfig(khr_mode="nearest_100")) == expected


def test_khr_other_increments():
    assert apply_rounding(1234, "KHR", RoundingConfig(khr_mode="nearest_50")) == Decimal("1250")
    assert apply_rounding(1234, "KHR", RoundingConfig(khr_mode="nearest_10")) == Decimal("1230")
    assert apply_rounding(Decimal("1234.5"), "KHR", RoundingConfig(khr_mode="nearest_1")) == Decimal("1235")


def test_unknown_khr_mode_falls_back_to_nearest_100():
    assert apply_rounding(149, "KHR", RoundingConfig(khr_mode="nearest_7")) == Decimal("100")


def test_usd_modes():
    assert apply_rounding(Decimal("2.345"), "USD", RoundingConfig(mode="half-up")) == Decimal("2.35")
    assert apply_rounding(Decimal("2.345"), "USD", RoundingConfig(mode="half-even")) == Decimal("2.34")
    assert apply_rounding(Decimal("2.349"), "USD", RoundingConfig(mode="floor")) == Decimal("2.34")
    assert apply_rounding(Decimal("-2.341"), "USD", RoundingConfig(mode="floor")) == Decimal("-2.35")


def test_usd_decimals_setting():
    assert apply_rounding(Decimal("2.3456"), "USD", RoundingConfig(usd_decimals=3)) == Decimal("2.346")
    assert apply_rounding(Decimal("2.5"), "USD", RoundingConfig(usd_decimals=0)) == Decimal("3")


def test_unknown_currency_is_two_decimals_half_up():
    assert apply_rounding(Decimal("1.005"), "EUR") == Decimal("1.01")
    assert apply_rounding(Decimal("1.004"), None) == Decimal("1.00")


def test_float_input_goes_through_str():
    # 1.005 as a binary float is 1.00499999...; str() keeps the decimal intent
    assert round_half_up(1.005) == Decimal("1.01")
    assert apply_rounding(0.1 + 0.2, "USD") == Decimal("0.30")


def test_rounding_is_idempotent():
    cfg = RoundingConfig()
    for currency, amount in (("KHR", Decimal("12345.67")), ("USD", Decimal("9.995")), ("XYZ", Decimal("3.333"))):
        once = apply_rounding(amount, currency, cfg)
        assert apply_rounding(once, currency, cfg) == once


def test_helpers():
    assert round_half_even(Decimal("0.125")) == Decimal("0.12")
    assert round_floor(Decimal("0.129")) == Decimal("0.12")
    assert round_to_increment(Decimal("249.99"), Decimal("100")) == Decimal("200")


def test_to_decimal_never_raises():
    assert to_decimal(None) == Decimal("0")
    assert to_decimal("abc") == Decimal("0")
    assert to_decimal(float("nan")) == Decimal("0")
    assert to_decimal(Decimal("Infinity")) == Decimal("0")
    assert to_decimal("12.50") == Decimal("12.50")
