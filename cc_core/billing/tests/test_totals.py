# cc_core/billing/tests/test_totals.py
from decimal import Decimal

from cc_core.billing.rounding import RoundingConfig
from cc_core.billing.totals import compute_totals, is_item_taxable, line_subtotal

CLINIC_ITEMS = [
    {"item_type": "service", "price": "50", "unit": 1, "taxable": True},
    {"item_type": "lab", "price": "25", "unit": 2, "discount": "5"},
]


def _clinic_totals(**overrides):
    kwargs = dict(
        invoice_discount=Decimal("10"),
        tax_rate=Decimal("10"),
        service_charge_rate=Decimal("5"),
        calc_order="A",
        currency="KHR",
        rounding=RoundingConfig(khr_mode="nearest_100"),
    )
    kwargs.update(overrides)
    return compute_totals(CLINIC_ITEMS, **kwargs)


def test_line_subtotal_never_negative():
    assert line_subtotal(price=Decimal("10"), unit=1, discount=Decimal("25")) == Decimal("0")
    assert line_subtotal(price=Decimal("10"), unit=3, discount=Decimal("5")) == Decimal("25.00")


def test_line_subtotal_clamps_inputs():
    # unit below 1 counts as 1; negative price/discount count as 0
    assert line_subtotal(price=Decimal("10"), unit=0) == Decimal("10.00")
    assert line_subtotal(price=Decimal("-10"), unit=2) == Decimal("0.00")
    assert line_subtotal(price=Decimal("10"), unit=2, discount=Decimal("-5")) == Decimal("20.00")


def test_taxability_resolution():
    assert is_item_taxable({"item_type": "lab", "taxable": True}) is True
    assert is_item_taxable({"item_type": "service", "taxable": False}) is False
    assert is_item_taxable({"item_type": "lab"}) is False
    assert is_item_taxable({"item_type": "service"}) is True
    assert is_item_taxable({"item_type": "service"}, default_item_taxable=False) is False
    assert is_item_taxable({"item_type": "lab"}, non_taxable_types=()) is True


def test_order_a_clinic_example():
    t = _clinic_totals()

    assert t.line_sum == Decimal("95.00")
    assert t.taxable_sum == Decimal("50.00")
    assert t.service_charge_amount == Decimal("4.25")
    # (85 + 4.25) * 50/95 * 10%
    assert t.tax_amount == Decimal("4.70")
    # 93.95 before currency rounding
    assert t.total_amount == Decimal("100")


def test_order_a_usd_keeps_cents():
    t = _clinic_totals(currency="USD")
    assert t.total_amount == Decimal("93.95")


def test_order_b_taxes_before_discount():
    t = _clinic_totals(calc_order="B", currency="USD")

    # tax on taxable lines: 50 * 10% = 5.00
    assert t.tax_amount == Decimal("5.00")
    # (95 + 5 - 10) * 5% = 4.50
    assert t.service_charge_amount == Decimal("4.50")
    assert t.total_amount == Decimal("94.50")


def test_orders_are_deterministic():
    for order in ("A", "B"):
        assert _clinic_totals(calc_order=order) == _clinic_totals(calc_order=order)


def test_unknown_order_is_treated_as_a():
    assert _clinic_totals(calc_order="Z") == _clinic_totals(calc_order="A")


def test_empty_items_are_all_zero():
    t = compute_totals([], invoice_discount=Decimal("10"), tax_rate=10, service_charge_rate=5, currency="USD")
    assert t.line_sum == 0
    assert t.tax_amount == 0
    assert t.service_charge_amount == 0
    assert t.total_amount == Decimal("0.00")


def test_discount_larger_than_lines_clamps_total_to_zero():
    t = compute_totals(
        [{"price": "20"}],
        invoice_discount=Decimal("50"),
        tax_rate=10,
        service_charge_rate=5,
        currency="USD",
    )
    assert t.service_charge_amount == Decimal("0.00")
    assert t.tax_amount == Decimal("0.00")
    assert t.total_amount == Decimal("0.00")


def test_negative_rates_and_discount_clamp_to_zero():
    t = compute_totals(
        [{"price": "20", "taxable": True}],
        invoice_discount=Decimal("-5"),
        tax_rate=-10,
        service_charge_rate=-5,
        currency="USD",
    )
    assert t.invoice_discount == 0
    assert t.total_amount == Decimal("20.00")
