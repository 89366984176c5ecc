# cc_core/conftest.py
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from cc_core.billing.models import ItemType
from cc_core.billing.services import InvoiceService
from cc_core.clinic_settings.models import GLOBAL_SETTINGS_KEY, ClinicSettings


@pytest.fixture
def user(db):
    User = get_user_model()
    return User.objects.create_user(
        username="cashier",
        password="testpass",
        is_active=True,
    )


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def billing_settings(db):
    """
    Stored settings row matching the clinic example: 10% tax, 5% service
    charge, order A, KHR rounded to the nearest 100.
    """
    return ClinicSettings.objects.create(
        key=GLOBAL_SETTINGS_KEY,
        values={
            "baseCurrency": "KHR",
            "allowedCurrencies": ["KHR", "USD"],
            "taxRate": "10",
            "serviceChargeRate": "5",
            "calcOrder": "A",
            "roundingKHRMode": "nearest_100",
            "invoicePrefix": "INV",
            "invoiceResetScope": "monthly",
            "invoicePad": 4,
            "refundStatusPolicy": "anyRefund",
        },
    )


@pytest.fixture
def draft_invoice(billing_settings):
    """Draft with (1 x 50 taxable) + (2 x 25 - 5 lab) and discount 10."""
    inv = InvoiceService.create_draft(patient_id="PT-0001", currency="KHR", discount=Decimal("10"))
    InvoiceService.add_item(
        invoice_id=inv.id,
        item_type=ItemType.SERVICE,
        description="Consultation",
        price=Decimal("50"),
        unit=1,
        taxable=True,
    )
    InvoiceService.add_item(
        invoice_id=inv.id,
        item_type=ItemType.LAB,
        description="CBC",
        price=Decimal("25"),
        unit=2,
        discount=Decimal("5"),
    )
    return inv


@pytest.fixture
def final_invoice(draft_invoice):
    InvoiceService.finalize(invoice_id=draft_invoice.id, actor_id="u-1")
    draft_invoice.refresh_from_db()
    return draft_invoice


@pytest.fixture
def usd_invoice(billing_settings):
    """Final USD invoice totalling exactly 100.00 (no tax, no service charge)."""
    inv = InvoiceService.create_draft(
        patient_id="PT-0002",
        currency="USD",
        tax_rate=Decimal("0"),
        service_charge_rate=Decimal("0"),
    )
    InvoiceService.add_item(invoice_id=inv.id, item_type=ItemType.SERVICE, price=Decimal("100"))
    InvoiceService.finalize(invoice_id=inv.id, actor_id="u-1")
    inv.refresh_from_db()
    return inv
