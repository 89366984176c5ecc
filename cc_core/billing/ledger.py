# cc_core/billing/ledger.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable

from cc_core.billing.models import EntryType, PaymentStatus
from cc_core.billing.rounding import ZERO, to_decimal
from cc_core.clinic_settings.types import REFUND_POLICY_ANY, REFUND_POLICY_NET_NEGATIVE


@dataclass(frozen=True)
class PaymentSummary:
    paid_sum: Decimal
    refunded_sum: Decimal
    net_amount: Decimal
    outstanding: Decimal
    payment_status: str


def _entry_type(entry: Any) -> str:
    if isinstance(entry, dict):
        return str(entry.get("entry_type") or entry.get("type") or EntryType.PAYMENT)
    return str(getattr(entry, "entry_type", None) or EntryType.PAYMENT)


def _amount(entry: Any) -> Decimal:
    raw = entry.get("amount") if isinstance(entry, dict) else getattr(entry, "amount", None)
    return to_decimal(raw)


def summarize_payments(entries: Iterable[Any], total, policy: str = REFUND_POLICY_ANY) -> PaymentSummary:
    """
    Derives payment status from the full ledger.

    anyRefund:   any refund at all -> refunded
    netNegative: refunded only when refunds exceed payments
    none:        refunds only reduce the net
    """
    paid = ZERO
    refunded = ZERO
    for entry in entries:
        kind = _entry_type(entry)
        if kind == EntryType.REFUND:
            refunded += _amount(entry)
        elif kind == EntryType.PAYMENT:
            paid += _amount(entry)

    total_d = to_decimal(total)
    net = paid - refunded

    if policy == REFUND_POLICY_ANY and refunded > 0:
        status = PaymentStatus.REFUNDED
    elif policy == REFUND_POLICY_NET_NEGATIVE and net < 0:
        status = PaymentStatus.REFUNDED
    elif net <= 0:
        status = PaymentStatus.UNPAID
    elif net < total_d:
        status = PaymentStatus.PARTIAL
    else:
        status = PaymentStatus.PAID

    return PaymentSummary(
        paid_sum=paid,
        refunded_sum=refunded,
        net_amount=net,
        outstanding=max(ZERO, total_d - net),
        payment_status=str(status.value),
    )
