# cc_core/billing/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from cc_core.audit.services import AuditService
from cc_core.billing.ledger import PaymentSummary, summarize_payments
from cc_core.billing.models import (
    DocStatus,
    EntryType,
    Invoice,
    InvoiceItem,
    InvoicePayment,
    ItemType,
    PaymentStatus,
)
from cc_core.billing.rounding import CENT, to_decimal
from cc_core.billing.totals import Totals, compute_invoice_totals, line_subtotal
from cc_core.clinic_settings.selectors import get_billing_settings
from cc_core.clinic_settings.types import ASSIGN_ON_FINALIZE
from cc_core.common.api.exceptions import InvalidStateError
from cc_core.sequences.services import SequenceAllocator

logger = logging.getLogger(__name__)

ENTITY_INVOICE = "Invoice"

# actor recorded when finalize is called without a user
SYSTEM_ACTOR = "system"


@dataclass(frozen=True)
class FinalizeResult:
    invoice: Invoice
    totals: Totals
    idempotent: bool


def _locked_invoice(invoice_id: UUID) -> Invoice:
    try:
        return Invoice.objects.select_for_update().get(id=invoice_id)
    except Invoice.DoesNotExist:
        raise NotFound(f"Invoice {invoice_id} not found.")


def _require_actor(actor_id) -> str:
    actor = str(actor_id or "").strip()
    if not actor:
        raise ValidationError({"user_id": "This field is required."})
    return actor


class InvoiceService:
    """
    Invoice lifecycle: draft -> final -> void.

    Every public method is one transaction with the invoice row locked.
    Preconditions are checked before the first write, so a rejected call
    leaves the invoice, its ledger and the sequence counters untouched.
    """

    @staticmethod
    @transaction.atomic
    def create_draft(
        *,
        patient_id: str,
        currency: str = "",
        discount=Decimal("0.00"),
        tax_rate=None,
        service_charge_rate=None,
        notes: str = "",
        actor_id: str = "",
    ) -> Invoice:
        settings = get_billing_settings()

        currency = (currency or settings.base_currency).strip().upper()
        if currency not in settings.allowed_currencies:
            raise ValidationError({"currency": f"Currency must be one of {list(settings.allowed_currencies)}."})

        if to_decimal(discount) < 0:
            raise ValidationError({"discount": "Discount must be >= 0."})
        for name, rate in (("tax_rate", tax_rate), ("service_charge_rate", service_charge_rate)):
            if rate is not None and to_decimal(rate) < 0:
                raise ValidationError({name: "Rate must be >= 0."})

        return Invoice.objects.create(
            patient_id=str(patient_id),
            currency=currency,
            discount=to_decimal(discount).quantize(CENT),
            tax_rate=None if tax_rate is None else to_decimal(tax_rate).quantize(CENT),
            service_charge_rate=None if service_charge_rate is None else to_decimal(service_charge_rate).quantize(CENT),
            notes=notes or "",
            created_by=str(actor_id or ""),
        )

    @staticmethod
    @transaction.atomic
    def add_item(
        *,
        invoice_id: UUID,
        price,
        unit=Decimal("1"),
        discount=Decimal("0.00"),
        item_type: str = ItemType.MANUAL,
        ref_id: str = "",
        description: str = "",
        taxable: bool | None = None,
    ) -> InvoiceItem:
        invoice = _locked_invoice(invoice_id)
        if invoice.doc_status != DocStatus.DRAFT:
            raise InvalidStateError("Items can only be added to a draft invoice.")

        if item_type not in ItemType.values:
            raise ValidationError({"item_type": f"Unknown item type '{item_type}'."})
        if to_decimal(price) < 0:
            raise ValidationError({"price": "Price must be >= 0."})
        if to_decimal(discount) < 0:
            raise ValidationError({"discount": "Discount must be >= 0."})

        return InvoiceItem.objects.create(
            invoice=invoice,
            item_type=item_type,
            ref_id=ref_id or "",
            description=description or "",
            price=to_decimal(price).quantize(CENT),
            unit=max(Decimal("1"), to_decimal(unit)).quantize(CENT),
            discount=to_decimal(discount).quantize(CENT),
            taxable=taxable,
            subtotal=line_subtotal(price=price, unit=unit, discount=discount),
        )

    @staticmethod
    def preview_totals(invoice_id: UUID) -> Totals:
        invoice = Invoice.objects.filter(id=invoice_id).first()
        if invoice is None:
            raise NotFound(f"Invoice {invoice_id} not found.")
        items = list(invoice.items.all())
        return compute_invoice_totals(invoice, items, get_billing_settings())

    @staticmethod
    @transaction.atomic
    def finalize(*, invoice_id: UUID, actor_id: str = SYSTEM_ACTOR) -> FinalizeResult:
        """
        draft -> final, minting the invoice number.

        Calling it again on a final invoice only recomputes totals and the
        ledger aggregates; the number is kept.
        """
        actor = str(actor_id or "").strip() or SYSTEM_ACTOR
        invoice = _locked_invoice(invoice_id)
        settings = get_billing_settings()

        if invoice.doc_status == DocStatus.VOID:
            raise InvalidStateError("A voided invoice cannot be finalized.")

        idempotent = invoice.doc_status == DocStatus.FINAL
        if not idempotent and settings.assign_invoice_no_on != ASSIGN_ON_FINALIZE:
            raise InvalidStateError(
                f"Invoice numbers are assigned on '{settings.assign_invoice_no_on}', not on finalize."
            )

        items = list(invoice.items.all())
        totals = compute_invoice_totals(invoice, items, settings)
        summary = summarize_payments(invoice.payments.all(), totals.total_amount, settings.refund_status_policy)

        for item in items:
            sub = line_subtotal(price=item.price, unit=item.unit, discount=item.discount)
            if item.subtotal != sub:
                item.subtotal = sub
                item.save(update_fields=["subtotal", "updated_at"])

        invoice.tax_amount = totals.tax_amount
        invoice.service_charge_amount = totals.service_charge_amount
        invoice.total_amount = totals.total_amount
        _apply_summary(invoice, summary)
        update_fields = [
            "tax_amount",
            "service_charge_amount",
            "total_amount",
            "payment_status",
            "amount_paid",
            "amount_due",
            "refunded_amount",
            "updated_at",
        ]

        if idempotent:
            invoice.save(update_fields=update_fields)
            AuditService.log(
                event_code="invoice.totals_recomputed",
                entity_type=ENTITY_INVOICE,
                entity_id=invoice.id,
                actor_id=actor,
                changed_fields=["tax_amount", "service_charge_amount", "total_amount", "payment_status"],
                metadata={"invoice_no": invoice.invoice_no, "totals": totals.as_dict()},
            )
            logger.info("invoice %s already final; totals recomputed", invoice.invoice_no)
            return FinalizeResult(invoice=invoice, totals=totals, idempotent=True)

        allocated = SequenceAllocator.next_number(
            stream="invoice",
            rule=settings.numbering_rule("invoice"),
            collision_policy=settings.collision_policy,
        )

        invoice.invoice_no = allocated.number
        invoice.doc_status = DocStatus.FINAL
        invoice.finalized_at = timezone.now()
        invoice.finalized_by = actor
        invoice.save(update_fields=update_fields + ["invoice_no", "doc_status", "finalized_at", "finalized_by"])

        AuditService.log(
            event_code="invoice.finalized",
            entity_type=ENTITY_INVOICE,
            entity_id=invoice.id,
            actor_id=actor,
            changed_fields=["invoice_no", "doc_status", "total_amount"],
            metadata={"invoice_no": allocated.number, "totals": totals.as_dict()},
        )
        logger.info("invoice %s finalized as %s total=%s", invoice.id, allocated.number, totals.total_amount)
        return FinalizeResult(invoice=invoice, totals=totals, idempotent=False)

    @staticmethod
    @transaction.atomic
    def record_payment(
        *,
        invoice_id: UUID,
        actor_id: str,
        amount,
        entry_type: str = EntryType.PAYMENT,
        method: str = "cash",
        paid_at: datetime | None = None,
        note: str = "",
        currency: str = "",
        fx_rate_to_base=None,
        received_from: str = "",
    ) -> tuple[InvoicePayment, PaymentSummary]:
        actor = _require_actor(actor_id)
        invoice = _locked_invoice(invoice_id)
        settings = get_billing_settings()

        if invoice.doc_status != DocStatus.FINAL:
            raise InvalidStateError("Payments can only be recorded on a final invoice.")
        if entry_type not in EntryType.values:
            raise ValidationError({"type": "Must be 'payment' or 'refund'."})
        if method not in settings.payment_methods:
            raise ValidationError({"method": f"Unknown payment method '{method}'."})

        amount_d = to_decimal(amount).quantize(CENT)
        if amount_d <= 0:
            raise ValidationError({"amount": "Amount must be > 0."})

        currency = (currency or invoice.currency or settings.base_currency).strip().upper()
        if currency not in settings.allowed_currencies:
            raise ValidationError({"currency": f"Currency must be one of {list(settings.allowed_currencies)}."})

        fx = None
        if fx_rate_to_base is not None:
            fx = to_decimal(fx_rate_to_base)
            if fx <= 0:
                raise ValidationError({"fx_rate_to_base": "Must be > 0."})

        payment = InvoicePayment.objects.create(
            invoice=invoice,
            entry_type=entry_type,
            amount=amount_d,
            currency=currency,
            fx_rate_to_base=fx,
            method=method,
            paid_at=paid_at or timezone.now(),
            recorded_by=actor,
            received_from=received_from or "",
            note=note or "",
        )

        summary = summarize_payments(
            invoice.payments.all(),
            invoice.total_amount,
            settings.refund_status_policy,
        )
        _apply_summary(invoice, summary)
        update_fields = ["payment_status", "amount_paid", "amount_due", "refunded_amount", "updated_at"]

        if summary.payment_status == PaymentStatus.PAID and invoice.paid_at is None:
            invoice.paid_at = payment.paid_at
            invoice.paid_by = actor
            update_fields += ["paid_at", "paid_by"]

        invoice.save(update_fields=update_fields)

        is_refund = entry_type == EntryType.REFUND
        AuditService.log(
            event_code="invoice.refund_recorded" if is_refund else "invoice.payment_recorded",
            entity_type=ENTITY_INVOICE,
            entity_id=invoice.id,
            actor_id=actor,
            changed_fields=["payment_status", "amount_paid", "amount_due", "refunded_amount"],
            note=note or "",
            metadata={
                "payment_id": str(payment.id),
                "amount": str(amount_d),
                "method": method,
                "payment_status": summary.payment_status,
            },
        )
        logger.info(
            "invoice %s: %s %s via %s -> %s",
            invoice.invoice_no,
            entry_type,
            amount_d,
            method,
            summary.payment_status,
        )
        return payment, summary

    @staticmethod
    @transaction.atomic
    def void(*, invoice_id: UUID, actor_id: str, reason: str) -> Invoice:
        actor = _require_actor(actor_id)
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError({"reason": "A reason is required to void an invoice."})

        invoice = _locked_invoice(invoice_id)
        if invoice.doc_status != DocStatus.FINAL:
            raise InvalidStateError("Only a final invoice can be voided.")

        invoice.mark_void(actor_id=actor, reason=reason)
        invoice.save(update_fields=["doc_status", "voided_at", "voided_by", "void_reason", "updated_at"])

        AuditService.log(
            event_code="invoice.voided",
            entity_type=ENTITY_INVOICE,
            entity_id=invoice.id,
            actor_id=actor,
            changed_fields=["doc_status", "voided_at", "voided_by", "void_reason"],
            note=reason,
            metadata={"invoice_no": invoice.invoice_no},
        )
        logger.info("invoice %s voided by %s", invoice.invoice_no, actor)
        return invoice

    @staticmethod
    @transaction.atomic
    def set_archived(*, invoice_id: UUID, actor_id: str, archived: bool, reason: str = "") -> Invoice:
        actor = _require_actor(actor_id)
        invoice = _locked_invoice(invoice_id)

        invoice.is_archived = bool(archived)
        invoice.save(update_fields=["is_archived", "updated_at"])

        AuditService.log(
            event_code="invoice.archived" if archived else "invoice.unarchived",
            entity_type=ENTITY_INVOICE,
            entity_id=invoice.id,
            actor_id=actor,
            changed_fields=["is_archived"],
            note=reason or "",
        )
        return invoice

    @staticmethod
    @transaction.atomic
    def stamp_print(*, invoice_id: UUID, actor_id: str, actor_name: str = "", note: str = "") -> Invoice:
        actor = _require_actor(actor_id)
        invoice = _locked_invoice(invoice_id)

        invoice.printed_at = timezone.now()
        invoice.printed_by = actor
        invoice.printed_by_name = actor_name or ""
        invoice.save(update_fields=["printed_at", "printed_by", "printed_by_name", "updated_at"])

        AuditService.log(
            event_code="invoice.printed",
            entity_type=ENTITY_INVOICE,
            entity_id=invoice.id,
            actor_id=actor,
            changed_fields=["printed_at", "printed_by", "printed_by_name"],
            note=note or "",
        )
        return invoice


def _apply_summary(invoice: Invoice, summary: PaymentSummary) -> None:
    invoice.payment_status = summary.payment_status
    invoice.amount_paid = summary.net_amount.quantize(CENT)
    invoice.amount_due = summary.outstanding.quantize(CENT)
    invoice.refunded_amount = summary.refunded_sum.quantize(CENT)
