# cc_core/billing/filters.py
from __future__ import annotations

import django_filters

from cc_core.billing.models import DocStatus, Invoice, PaymentStatus


class InvoiceFilter(django_filters.FilterSet):
    doc_status = django_filters.ChoiceFilter(choices=DocStatus.choices)
    payment_status = django_filters.ChoiceFilter(choices=PaymentStatus.choices)
    is_archived = django_filters.BooleanFilter()
    patient_id = django_filters.CharFilter()
    currency = django_filters.CharFilter(lookup_expr="iexact")
    invoice_no = django_filters.CharFilter(lookup_expr="icontains")
    created_from = django_filters.DateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_to = django_filters.DateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Invoice
        fields = ["doc_status", "payment_status", "is_archived", "patient_id", "currency", "invoice_no"]
