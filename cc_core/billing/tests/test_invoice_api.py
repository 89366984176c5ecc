# cc_core/billing/tests/test_invoice_api.py
from decimal import Decimal
from uuid import uuid4

import pytest
from rest_framework.test import APIClient

from cc_core.audit.models import AuditEvent
from cc_core.billing.models import InvoicePayment

BASE = "/api/v1/billing/invoices"


@pytest.mark.django_db
def test_requires_authentication(draft_invoice):
    resp = APIClient().get(f"{BASE}/")
    assert resp.status_code == 401
    assert resp.data["error"]["code"] == "not_authenticated"


@pytest.mark.django_db
def test_list_and_filter(api_client, draft_invoice, usd_invoice):
    resp = api_client.get(f"{BASE}/")
    assert resp.status_code == 200
    assert resp.data["count"] == 2

    resp = api_client.get(f"{BASE}/", {"doc_status": "final"})
    assert resp.status_code == 200
    assert [r["id"] for r in resp.data["results"]] == [str(usd_invoice.id)]

    resp = api_client.get(f"{BASE}/", {"currency": "khr"})
    assert [r["id"] for r in resp.data["results"]] == [str(draft_invoice.id)]


@pytest.mark.django_db
def test_list_rejects_bad_filter_value(api_client, draft_invoice):
    resp = api_client.get(f"{BASE}/", {"doc_status": "pending"})
    assert resp.status_code == 400
    assert resp.data["error"]["code"] == "validation_error"


@pytest.mark.django_db
def test_retrieve_includes_items(api_client, draft_invoice):
    resp = api_client.get(f"{BASE}/{draft_invoice.id}/")
    assert resp.status_code == 200
    assert resp.data["doc_status"] == "draft"
    assert len(resp.data["items"]) == 2


@pytest.mark.django_db
def test_retrieve_unknown_invoice_is_404_envelope(api_client, billing_settings):
    resp = api_client.get(f"{BASE}/{uuid4()}/")
    assert resp.status_code == 404
    assert resp.data["error"]["code"] == "not_found"
    assert resp.data["error"]["request_id"]


@pytest.mark.django_db
def test_totals_preview(api_client, draft_invoice):
    resp = api_client.get(f"{BASE}/{draft_invoice.id}/totals/")
    assert resp.status_code == 200
    assert resp.data["line_sum"] == "95.00"
    assert resp.data["service_charge_amount"] == "4.25"
    assert resp.data["tax_amount"] == "4.70"
    assert resp.data["total_amount"] == "100.00"


@pytest.mark.django_db
def test_finalize_and_refinalize(api_client, draft_invoice):
    resp = api_client.post(f"{BASE}/{draft_invoice.id}/finalize/", {"user_id": "u-1"}, format="json")
    assert resp.status_code == 200
    assert resp.data["ok"] is True
    assert resp.data["idempotent"] is False
    assert resp.data["payment_status"] == "unpaid"
    assert resp.data["totals"]["total_amount"] == "100.00"
    invoice_no = resp.data["invoice_no"]
    assert invoice_no.startswith("INV-")

    resp = api_client.post(f"{BASE}/{draft_invoice.id}/finalize/", {"user_id": "u-1"}, format="json")
    assert resp.status_code == 200
    assert resp.data["idempotent"] is True
    assert resp.data["invoice_no"] == invoice_no


@pytest.mark.django_db
def test_finalize_with_empty_body_records_system_actor(api_client, draft_invoice):
    resp = api_client.post(f"{BASE}/{draft_invoice.id}/finalize/", {}, format="json")
    assert resp.status_code == 200, resp.data
    assert resp.data["ok"] is True
    assert resp.data["invoice_no"].startswith("INV-")
    assert resp.data["totals"]["total_amount"] == "100.00"
    assert resp.data["payment_status"] == "unpaid"

    draft_invoice.refresh_from_db()
    assert draft_invoice.finalized_by == "system"
    event = AuditEvent.objects.get(entity_id=draft_invoice.id, event_code="invoice.finalized")
    assert event.actor_id == "system"


@pytest.mark.django_db
def test_payment_on_draft_is_invalid_state(api_client, draft_invoice):
    resp = api_client.post(
        f"{BASE}/{draft_invoice.id}/payments/",
        {"type": "payment", "amount": "10.00", "method": "cash", "user_id": "u-1"},
        format="json",
    )
    assert resp.status_code == 400
    assert resp.data["error"]["code"] == "invalid_state"


@pytest.mark.django_db
def test_record_and_list_payments(api_client, usd_invoice):
    resp = api_client.post(
        f"{BASE}/{usd_invoice.id}/payments/",
        {"type": "payment", "amount": "60.00", "method": "cash", "user_id": "u-1", "received_from": "Sok"},
        format="json",
    )
    assert resp.status_code == 201
    assert resp.data["ok"] is True
    assert resp.data["payment_status"] == "partial"
    assert resp.data["amount_paid"] == "60.00"
    assert resp.data["amount_due"] == "40.00"
    assert resp.data["refunded_amount"] == "0.00"

    resp = api_client.get(f"{BASE}/{usd_invoice.id}/payments/")
    assert resp.status_code == 200
    assert len(resp.data) == 1
    assert resp.data[0]["type"] == "payment"
    assert resp.data[0]["received_from"] == "Sok"


@pytest.mark.django_db
def test_payment_idempotency_key_replays(api_client, usd_invoice):
    body = {"type": "payment", "amount": "25.00", "method": "card", "user_id": "u-1"}

    r1 = api_client.post(f"{BASE}/{usd_invoice.id}/payments/", body, format="json", HTTP_IDEMPOTENCY_KEY="k-1")
    r2 = api_client.post(f"{BASE}/{usd_invoice.id}/payments/", body, format="json", HTTP_IDEMPOTENCY_KEY="k-1")

    assert r1.status_code == 201
    assert r2.status_code == 201
    assert r2.data["payment_id"] == r1.data["payment_id"]
    assert InvoicePayment.objects.filter(invoice=usd_invoice).count() == 1


@pytest.mark.django_db
def test_refund_via_api(api_client, usd_invoice):
    api_client.post(
        f"{BASE}/{usd_invoice.id}/payments/",
        {"type": "payment", "amount": "100", "method": "cash", "user_id": "u-1"},
        format="json",
    )
    resp = api_client.post(
        f"{BASE}/{usd_invoice.id}/payments/",
        {"type": "refund", "amount": "20", "method": "cash", "user_id": "u-1", "note": "overcharge"},
        format="json",
    )
    assert resp.status_code == 201
    assert resp.data["payment_status"] == "refunded"
    assert Decimal(resp.data["refunded_amount"]) == Decimal("20")


@pytest.mark.django_db
def test_void_flow(api_client, final_invoice):
    resp = api_client.post(f"{BASE}/{final_invoice.id}/void/", {"user_id": "u-1"}, format="json")
    assert resp.status_code == 400
    assert "reason" in resp.data["error"]["details"]

    resp = api_client.post(
        f"{BASE}/{final_invoice.id}/void/", {"user_id": "u-1", "reason": "Duplicate"}, format="json"
    )
    assert resp.status_code == 200
    assert resp.data == {"ok": True}

    resp = api_client.post(
        f"{BASE}/{final_invoice.id}/void/", {"user_id": "u-1", "reason": "Again"}, format="json"
    )
    assert resp.status_code == 400
    assert resp.data["error"]["code"] == "invalid_state"


@pytest.mark.django_db
def test_archive_and_print(api_client, final_invoice):
    resp = api_client.post(
        f"{BASE}/{final_invoice.id}/archive/", {"user_id": "u-1", "archived": True}, format="json"
    )
    assert resp.status_code == 200
    assert resp.data == {"ok": True, "is_archived": True}

    resp = api_client.get(f"{BASE}/", {"is_archived": "true"})
    assert resp.data["count"] == 1

    resp = api_client.post(
        f"{BASE}/{final_invoice.id}/print/", {"user_id": "u-1", "user_name": "Dara"}, format="json"
    )
    assert resp.status_code == 200
    assert resp.data["ok"] is True
    assert resp.data["printed_at"]
