# cc_core/billing/tests/test_ledger.py
from decimal import Decimal

from cc_core.billing.ledger import summarize_payments


def _pay(amount):
    return {"type": "payment", "amount": amount}


def _refund(amount):
    return {"entry_type": "refund", "amount": amount}


def test_partial_payment():
    s = summarize_payments([_pay("60")], Decimal("100"))
    assert s.payment_status == "partial"
    assert s.outstanding == Decimal("40")


def test_full_payment():
    s = summarize_payments([_pay("100")], Decimal("100"))
    assert s.payment_status == "paid"
    assert s.outstanding == Decimal("0")


def test_overpayment_is_paid_with_nothing_outstanding():
    s = summarize_payments([_pay("80"), _pay("40")], Decimal("100"))
    assert s.payment_status == "paid"
    assert s.net_amount == Decimal("120")
    assert s.outstanding == Decimal("0")


def test_no_entries_is_unpaid():
    s = summarize_payments([], Decimal("100"))
    assert s.payment_status == "unpaid"
    assert s.outstanding == Decimal("100")


def test_any_refund_marks_refunded():
    s = summarize_payments([_pay("100"), _refund("20")], Decimal("100"), "anyRefund")
    assert s.payment_status == "refunded"
    assert s.paid_sum == Decimal("100")
    assert s.refunded_sum == Decimal("20")
    assert s.net_amount == Decimal("80")
    assert s.outstanding == Decimal("20")


def test_net_negative_policy():
    s = summarize_payments([_pay("100"), _refund("20")], Decimal("100"), "netNegative")
    assert s.payment_status == "partial"

    s = summarize_payments([_pay("10"), _refund("20")], Decimal("100"), "netNegative")
    assert s.payment_status == "refunded"


def test_none_policy_refunds_only_reduce_net():
    s = summarize_payments([_pay("100"), _refund("100")], Decimal("100"), "none")
    assert s.payment_status == "unpaid"


def test_garbage_amounts_count_as_zero():
    s = summarize_payments([{"type": "payment", "amount": "n/a"}, _pay(None)], Decimal("50"))
    assert s.paid_sum == 0
    assert s.payment_status == "unpaid"


def test_model_like_entries():
    class Entry:
        def __init__(self, entry_type, amount):
            self.entry_type = entry_type
            self.amount = amount

    s = summarize_payments([Entry("payment", Decimal("30")), Entry("payment", Decimal("20"))], Decimal("50"))
    assert s.payment_status == "paid"
