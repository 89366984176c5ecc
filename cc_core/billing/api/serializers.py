# cc_core/billing/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from cc_core.billing.models import EntryType, Invoice, InvoiceItem, InvoicePayment
from cc_core.billing.services import SYSTEM_ACTOR


class InvoiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceItem
        fields = [
            "id",
            "item_type",
            "ref_id",
            "description",
            "price",
            "unit",
            "discount",
            "taxable",
            "subtotal",
            "created_at",
        ]
        read_only_fields = fields


class InvoicePaymentSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source="entry_type", read_only=True)

    class Meta:
        model = InvoicePayment
        fields = [
            "id",
            "invoice",
            "type",
            "amount",
            "currency",
            "fx_rate_to_base",
            "method",
            "paid_at",
            "recorded_by",
            "received_from",
            "note",
            "created_at",
        ]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    items = InvoiceItemSerializer(many=True, read_only=True)
    payments = InvoicePaymentSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "patient_id",
            "invoice_no",
            "doc_status",
            "payment_status",
            "currency",
            "fx_rate_to_base",
            "discount",
            "tax_rate",
            "service_charge_rate",
            "tax_amount",
            "service_charge_amount",
            "total_amount",
            "amount_paid",
            "amount_due",
            "refunded_amount",
            "is_archived",
            "created_by",
            "finalized_at",
            "finalized_by",
            "voided_at",
            "voided_by",
            "void_reason",
            "printed_at",
            "printed_by",
            "printed_by_name",
            "paid_at",
            "paid_by",
            "notes",
            "items",
            "payments",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TotalsSerializer(serializers.Serializer):
    line_sum = serializers.DecimalField(max_digits=14, decimal_places=2)
    taxable_sum = serializers.DecimalField(max_digits=14, decimal_places=2)
    invoice_discount = serializers.DecimalField(max_digits=14, decimal_places=2)
    service_charge_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    tax_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class FinalizeSerializer(serializers.Serializer):
    user_id = serializers.CharField(max_length=64, required=False, allow_blank=True, default=SYSTEM_ACTOR)


class PaymentCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=EntryType.choices, default=EntryType.PAYMENT)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    method = serializers.CharField(max_length=16, default="cash")
    user_id = serializers.CharField(max_length=64)
    paid_at = serializers.DateTimeField(required=False, allow_null=True)
    note = serializers.CharField(required=False, allow_blank=True, default="")
    currency = serializers.CharField(required=False, allow_blank=True, max_length=8, default="")
    fx_rate_to_base = serializers.DecimalField(max_digits=18, decimal_places=6, required=False, allow_null=True)
    received_from = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")


class VoidSerializer(serializers.Serializer):
    user_id = serializers.CharField(max_length=64)
    reason = serializers.CharField()


class ArchiveSerializer(serializers.Serializer):
    user_id = serializers.CharField(max_length=64)
    archived = serializers.BooleanField()
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class PrintSerializer(serializers.Serializer):
    user_id = serializers.CharField(max_length=64)
    user_name = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")
    note = serializers.CharField(required=False, allow_blank=True, default="")
