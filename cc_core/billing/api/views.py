# cc_core/billing/api/views.py
from __future__ import annotations

from uuid import UUID

from django_filters.utils import translate_validation
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from cc_core.billing.api.serializers import (
    ArchiveSerializer,
    FinalizeSerializer,
    InvoicePaymentSerializer,
    InvoiceSerializer,
    PaymentCreateSerializer,
    PrintSerializer,
    TotalsSerializer,
    VoidSerializer,
)
from cc_core.billing.filters import InvoiceFilter
from cc_core.billing.models import Invoice
from cc_core.billing.rounding import CENT
from cc_core.billing.selectors import invoices_qs, payments_for_invoice
from cc_core.billing.services import InvoiceService
from cc_core.common.api.pagination import paginate
from cc_core.common.idempotency import get_key, load_response, save_response


def _uuid(value, field_name: str = "id") -> UUID:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise DRFValidationError({field_name: "Invalid UUID"})


def _get_invoice(pk) -> Invoice:
    inv = invoices_qs().filter(id=_uuid(pk)).first()
    if inv is None:
        raise NotFound("Invoice not found.")
    return inv


class InvoiceViewSet(viewsets.GenericViewSet):
    """
    Billing invoices:
    - list/retrieve
    - totals preview
    - finalize / void / archive / print
    """
    serializer_class = InvoiceSerializer
    queryset = Invoice.objects.none()

    @extend_schema(
        tags=["Billing"],
        responses={200: InvoiceSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="doc_status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="payment_status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="is_archived", type=OpenApiTypes.BOOL, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="patient_id", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="currency", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        fs = InvoiceFilter(data=request.query_params, queryset=invoices_qs())
        if not fs.is_valid():
            raise translate_validation(fs.errors)
        return paginate(request, fs.qs, InvoiceSerializer)

    @extend_schema(tags=["Billing"], responses={200: InvoiceSerializer})
    def retrieve(self, request, pk=None):
        return Response(InvoiceSerializer(_get_invoice(pk)).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Billing"], responses={200: TotalsSerializer})
    @action(detail=True, methods=["get"], url_path="totals")
    def totals(self, request, pk=None):
        totals = InvoiceService.preview_totals(_uuid(pk))
        return Response(TotalsSerializer(totals).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Billing"], request=FinalizeSerializer, responses={200: OpenApiTypes.OBJECT})
    @action(detail=True, methods=["post"], url_path="finalize")
    def finalize(self, request, pk=None):
        ser = FinalizeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        result = InvoiceService.finalize(invoice_id=_uuid(pk), actor_id=ser.validated_data["user_id"])
        return Response(
            {
                "ok": True,
                "invoice_no": result.invoice.invoice_no,
                "totals": TotalsSerializer(result.totals).data,
                "payment_status": result.invoice.payment_status,
                "idempotent": result.idempotent,
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(tags=["Billing"], request=VoidSerializer, responses={200: OpenApiTypes.OBJECT})
    @action(detail=True, methods=["post"], url_path="void")
    def void(self, request, pk=None):
        ser = VoidSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        InvoiceService.void(
            invoice_id=_uuid(pk),
            actor_id=ser.validated_data["user_id"],
            reason=ser.validated_data["reason"],
        )
        return Response({"ok": True}, status=status.HTTP_200_OK)

    @extend_schema(tags=["Billing"], request=ArchiveSerializer, responses={200: OpenApiTypes.OBJECT})
    @action(detail=True, methods=["post"], url_path="archive")
    def archive(self, request, pk=None):
        ser = ArchiveSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        inv = InvoiceService.set_archived(
            invoice_id=_uuid(pk),
            actor_id=ser.validated_data["user_id"],
            archived=ser.validated_data["archived"],
            reason=ser.validated_data.get("reason", ""),
        )
        return Response({"ok": True, "is_archived": inv.is_archived}, status=status.HTTP_200_OK)

    @extend_schema(tags=["Billing"], request=PrintSerializer, responses={200: OpenApiTypes.OBJECT})
    @action(detail=True, methods=["post"], url_path="print")
    def print(self, request, pk=None):
        ser = PrintSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        inv = InvoiceService.stamp_print(
            invoice_id=_uuid(pk),
            actor_id=ser.validated_data["user_id"],
            actor_name=ser.validated_data.get("user_name", ""),
            note=ser.validated_data.get("note", ""),
        )
        return Response({"ok": True, "printed_at": inv.printed_at}, status=status.HTTP_200_OK)


class InvoicePaymentsView(APIView):
    """
    /billing/invoices/<invoice_id>/payments/
    - GET list ledger entries
    - POST record a payment or refund (Idempotency-Key aware)
    """

    @extend_schema(tags=["Billing"], responses={200: InvoicePaymentSerializer(many=True)})
    def get(self, request, invoice_id: UUID):
        inv = _get_invoice(invoice_id)
        qs = payments_for_invoice(invoice_id=inv.id)
        return Response(InvoicePaymentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Billing"],
        request=PaymentCreateSerializer,
        responses={201: OpenApiTypes.OBJECT},
        parameters=[
            OpenApiParameter(name="Idempotency-Key", location=OpenApiParameter.HEADER, required=False, type=str),
        ],
    )
    def post(self, request, invoice_id: UUID):
        ser = PaymentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        idem = get_key(request)
        if idem:
            cached = load_response(data["user_id"], request.method, request.path, idem)
            if cached is not None:
                cached_status, cached_body = cached
                return Response(cached_body, status=cached_status)

        payment, summary = InvoiceService.record_payment(
            invoice_id=_uuid(invoice_id, "invoice_id"),
            actor_id=data["user_id"],
            entry_type=data["type"],
            amount=data["amount"],
            method=data["method"],
            paid_at=data.get("paid_at"),
            note=data.get("note", ""),
            currency=data.get("currency", ""),
            fx_rate_to_base=data.get("fx_rate_to_base"),
            received_from=data.get("received_from", ""),
        )

        out = {
            "ok": True,
            "payment_id": str(payment.id),
            "payment_status": summary.payment_status,
            "refunded_amount": str(summary.refunded_sum.quantize(CENT)),
            "amount_paid": str(summary.net_amount.quantize(CENT)),
            "amount_due": str(summary.outstanding.quantize(CENT)),
        }

        if idem:
            save_response(data["user_id"], request.method, request.path, idem, out, status_code=status.HTTP_201_CREATED)

        return Response(out, status=status.HTTP_201_CREATED)
