# cc_core/billing/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet

from cc_core.billing.models import Invoice, InvoicePayment


def invoices_qs() -> QuerySet[Invoice]:
    return Invoice.objects.all().prefetch_related("items", "payments").order_by("-created_at")


def payments_for_invoice(*, invoice_id: UUID) -> QuerySet[InvoicePayment]:
    return InvoicePayment.objects.filter(invoice_id=invoice_id).order_by("paid_at", "created_at")
