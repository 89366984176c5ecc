# cc_core/billing/admin.py
from __future__ import annotations

from django.contrib import admin

from cc_core.billing.models import Invoice, InvoiceItem, InvoicePayment


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    fields = ("item_type", "ref_id", "description", "unit", "price", "discount", "taxable", "subtotal")
    readonly_fields = ("subtotal",)


class InvoicePaymentInline(admin.TabularInline):
    model = InvoicePayment
    extra = 0
    can_delete = False
    fields = ("entry_type", "amount", "currency", "method", "paid_at", "recorded_by", "note")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "invoice_no",
        "patient_id",
        "doc_status",
        "payment_status",
        "currency",
        "total_amount",
        "amount_due",
        "is_archived",
        "created_at",
    )
    list_filter = ("doc_status", "payment_status", "currency", "is_archived", "created_at")
    search_fields = ("id", "invoice_no", "patient_id")
    # status and numbers move through InvoiceService only
    readonly_fields = (
        "invoice_no",
        "doc_status",
        "payment_status",
        "tax_amount",
        "service_charge_amount",
        "total_amount",
        "amount_paid",
        "amount_due",
        "refunded_amount",
        "finalized_at",
        "finalized_by",
        "voided_at",
        "voided_by",
        "void_reason",
        "printed_at",
        "printed_by",
        "paid_at",
        "paid_by",
    )
    inlines = [InvoiceItemInline, InvoicePaymentInline]
    ordering = ("-created_at",)
