# cc_core/billing/models.py
from __future__ import annotations

from decimal import Decimal

from django.db import models
from django.utils import timezone

from cc_core.common.models import UUIDModel

MONEY = dict(max_digits=14, decimal_places=2)
ZERO_MONEY = Decimal("0.00")


class DocStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    FINAL = "final", "Final"
    VOID = "void", "Void"


class PaymentStatus(models.TextChoices):
    UNPAID = "unpaid", "Unpaid"
    PARTIAL = "partial", "Partially paid"
    PAID = "paid", "Paid"
    REFUNDED = "refunded", "Refunded"


class ItemType(models.TextChoices):
    LAB = "lab", "Lab test"
    SERVICE = "service", "Service"
    PHARMACY = "pharmacy", "Pharmacy"
    MANUAL = "manual", "Manual"


class EntryType(models.TextChoices):
    PAYMENT = "payment", "Payment"
    REFUND = "refund", "Refund"


class PaymentMethod(models.TextChoices):
    CASH = "cash", "Cash"
    CARD = "card", "Card"
    MOBILE = "mobile", "Mobile"
    INSURANCE = "insurance", "Insurance"
    BANK = "bank", "Bank transfer"


class Invoice(UUIDModel):
    """
    Financial document.

    draft -> final -> void. invoice_no is minted exactly once, at finalize.
    Transitions live in billing.services.InvoiceService; nothing else should
    write doc_status, invoice_no or the computed amounts.
    """
    patient_id = models.CharField(max_length=64, db_index=True)

    invoice_no = models.CharField(max_length=64, null=True, blank=True, unique=True)
    doc_status = models.CharField(max_length=16, choices=DocStatus.choices, default=DocStatus.DRAFT, db_index=True)
    payment_status = models.CharField(
        max_length=16,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
        db_index=True,
    )

    currency = models.CharField(max_length=8, blank=True, default="")
    fx_rate_to_base = models.DecimalField(max_digits=18, decimal_places=6, null=True, blank=True)

    # inputs
    discount = models.DecimalField(**MONEY, default=ZERO_MONEY)
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)  # percent; None -> settings
    service_charge_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    # computed
    tax_amount = models.DecimalField(**MONEY, default=ZERO_MONEY)
    service_charge_amount = models.DecimalField(**MONEY, default=ZERO_MONEY)
    total_amount = models.DecimalField(**MONEY, default=ZERO_MONEY)

    # ledger aggregates
    amount_paid = models.DecimalField(**MONEY, default=ZERO_MONEY)
    amount_due = models.DecimalField(**MONEY, default=ZERO_MONEY)
    refunded_amount = models.DecimalField(**MONEY, default=ZERO_MONEY)

    is_archived = models.BooleanField(default=False, db_index=True)

    created_by = models.CharField(max_length=64, blank=True, default="")
    finalized_at = models.DateTimeField(null=True, blank=True)
    finalized_by = models.CharField(max_length=64, blank=True, default="")
    voided_at = models.DateTimeField(null=True, blank=True)
    voided_by = models.CharField(max_length=64, blank=True, default="")
    void_reason = models.TextField(blank=True, default="")
    printed_at = models.DateTimeField(null=True, blank=True)
    printed_by = models.CharField(max_length=64, blank=True, default="")
    printed_by_name = models.CharField(max_length=255, blank=True, default="")
    paid_at = models.DateTimeField(null=True, blank=True)
    paid_by = models.CharField(max_length=64, blank=True, default="")

    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "billing_invoice"
        constraints = [
            models.CheckConstraint(condition=models.Q(total_amount__gte=0), name="ck_invoice_total_non_negative"),
        ]
        indexes = [
            models.Index(fields=["doc_status", "created_at"]),
            models.Index(fields=["patient_id", "created_at"]),
        ]

    def __str__(self) -> str:
        return self.invoice_no or f"draft {self.id}"

    def mark_void(self, *, actor_id: str, reason: str) -> None:
        self.doc_status = DocStatus.VOID
        self.voided_at = timezone.now()
        self.voided_by = actor_id
        self.void_reason = reason


class InvoiceItem(UUIDModel):
    """
    One billable row. subtotal = max(0, unit * price - discount).

    taxable=None means "use the settings default for this item type".
    """
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name="items")

    item_type = models.CharField(max_length=16, choices=ItemType.choices, default=ItemType.MANUAL)
    ref_id = models.CharField(max_length=64, blank=True, default="")  # catalog entity (lab test, product...)
    description = models.CharField(max_length=255, blank=True, default="")

    price = models.DecimalField(**MONEY, default=ZERO_MONEY)
    unit = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("1.00"))
    discount = models.DecimalField(**MONEY, default=ZERO_MONEY)
    taxable = models.BooleanField(null=True, blank=True)

    subtotal = models.DecimalField(**MONEY, default=ZERO_MONEY)

    class Meta:
        db_table = "billing_invoice_item"
        indexes = [
            models.Index(fields=["invoice", "created_at"]),
        ]


class InvoicePayment(UUIDModel):
    """
    Ledger entry (payment or refund). Append-only.
    """
    invoice = models.ForeignKey(Invoice, on_delete=models.PROTECT, related_name="payments")

    entry_type = models.CharField(max_length=16, choices=EntryType.choices, default=EntryType.PAYMENT)
    amount = models.DecimalField(**MONEY)
    currency = models.CharField(max_length=8, blank=True, default="")
    fx_rate_to_base = models.DecimalField(max_digits=18, decimal_places=6, null=True, blank=True)
    method = models.CharField(max_length=16, choices=PaymentMethod.choices, default=PaymentMethod.CASH)

    paid_at = models.DateTimeField(default=timezone.now)
    recorded_by = models.CharField(max_length=64)
    received_from = models.CharField(max_length=255, blank=True, default="")
    note = models.TextField(blank=True, default="")

    class Meta:
        db_table = "billing_invoice_payment"
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name="ck_payment_amount_positive"),
        ]
        indexes = [
            models.Index(fields=["invoice", "paid_at"]),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Invoice payments are append-only.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Invoice payments are append-only.")
