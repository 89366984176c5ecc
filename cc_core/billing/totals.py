# cc_core/billing/totals.py
"""
The one totals calculator. Preview (GET /totals/) and finalize both call
compute_totals, so a previewed total is exactly what gets persisted.

Two calculation orders:
  A: invoice discount -> service charge -> tax (tax prorated over the taxable share)
  B: tax on taxable lines -> invoice discount -> service charge
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Sequence

from cc_core.billing.rounding import CENT, ZERO, RoundingConfig, apply_rounding, round_half_up, to_decimal
from cc_core.clinic_settings.types import CALC_ORDER_B, BillingSettings

HUNDRED = Decimal("100")
ONE = Decimal("1")


@dataclass(frozen=True)
class Totals:
    line_sum: Decimal
    taxable_sum: Decimal
    invoice_discount: Decimal
    service_charge_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal

    def as_dict(self) -> dict[str, str]:
        return {
            "line_sum": str(self.line_sum),
            "taxable_sum": str(self.taxable_sum),
            "invoice_discount": str(self.invoice_discount),
            "service_charge_amount": str(self.service_charge_amount),
            "tax_amount": str(self.tax_amount),
            "total_amount": str(self.total_amount),
        }


def _get(item: Any, name: str, default=None):
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def _non_negative(value) -> Decimal:
    return max(ZERO, to_decimal(value))


def line_subtotal(*, price, unit=1, discount=0) -> Decimal:
    """max(0, unit * price - discount); unit is at least 1."""
    unit_d = max(ONE, to_decimal(unit))
    gross = unit_d * _non_negative(price)
    return max(ZERO, gross - _non_negative(discount)).quantize(CENT)


def is_item_taxable(item: Any, *, default_item_taxable: bool = True, non_taxable_types: Sequence[str] = ("lab",)) -> bool:
    flag = _get(item, "taxable")
    if flag is not None:
        return bool(flag)
    if (_get(item, "item_type") or "") in non_taxable_types:
        return False
    return bool(default_item_taxable)


def compute_totals(
    items: Iterable[Any],
    *,
    invoice_discount=0,
    tax_rate=0,
    service_charge_rate=0,
    calc_order: str = "A",
    currency: str | None = None,
    rounding: RoundingConfig | None = None,
    default_item_taxable: bool = True,
    non_taxable_types: Sequence[str] = ("lab",),
) -> Totals:
    """
    Items are InvoiceItem instances or dicts with price/unit/discount and
    optionally item_type/taxable.
    """
    line_sum = ZERO
    taxable_sum = ZERO
    for item in items:
        sub = line_subtotal(price=_get(item, "price"), unit=_get(item, "unit", 1), discount=_get(item, "discount"))
        line_sum += sub
        if is_item_taxable(item, default_item_taxable=default_item_taxable, non_taxable_types=non_taxable_types):
            taxable_sum += sub

    discount = _non_negative(invoice_discount)
    tax_pct = _non_negative(tax_rate) / HUNDRED
    svc_pct = _non_negative(service_charge_rate) / HUNDRED

    if calc_order == CALC_ORDER_B:
        tax = round_half_up(taxable_sum * tax_pct)
        after = max(ZERO, line_sum + tax - discount)
        svc = round_half_up(after * svc_pct)
    else:
        after = max(ZERO, line_sum - discount)
        svc = round_half_up(after * svc_pct)
        taxable_share = (taxable_sum / line_sum) if line_sum > 0 else ZERO
        tax = round_half_up((after + svc) * taxable_share * tax_pct)

    total = max(ZERO, line_sum - discount + svc + tax)

    return Totals(
        line_sum=line_sum,
        taxable_sum=taxable_sum,
        invoice_discount=discount,
        service_charge_amount=svc,
        tax_amount=tax,
        total_amount=apply_rounding(total, currency, rounding),
    )


def compute_invoice_totals(invoice, items: Iterable[Any], settings: BillingSettings) -> Totals:
    """Per-invoice rates/currency win over settings when set."""
    tax_rate = invoice.tax_rate if invoice.tax_rate is not None else settings.tax_rate
    svc_rate = invoice.service_charge_rate if invoice.service_charge_rate is not None else settings.service_charge_rate

    return compute_totals(
        items,
        invoice_discount=invoice.discount,
        tax_rate=tax_rate,
        service_charge_rate=svc_rate,
        calc_order=settings.calc_order,
        currency=invoice.currency or settings.base_currency,
        rounding=settings.rounding,
        default_item_taxable=settings.default_item_taxable,
        non_taxable_types=settings.non_taxable_types,
    )
