# cc_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from cc_core.audit.api.views import AuditEventViewSet
from cc_core.billing.api.views import InvoicePaymentsView, InvoiceViewSet
from cc_core.sequences.api.views import NumberingViewSet

router = DefaultRouter()

router.register(r"billing/invoices", InvoiceViewSet, basename="billing-invoices")
router.register(r"numbering", NumberingViewSet, basename="numbering")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    # Auth (JWT pair)
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),

    # Invoice ledger (non-ViewSet endpoint)
    path(
        "billing/invoices/<uuid:invoice_id>/payments/",
        InvoicePaymentsView.as_view(),
        name="billing-invoice-payments",
    ),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
