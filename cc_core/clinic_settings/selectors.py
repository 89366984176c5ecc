# cc_core/clinic_settings/selectors.py
from __future__ import annotations

from django.conf import settings as django_settings
from rest_framework.exceptions import NotFound

from cc_core.clinic_settings.models import GLOBAL_SETTINGS_KEY, ClinicSettings
from cc_core.clinic_settings.types import BillingSettings


def _settings_required() -> bool:
    return bool(getattr(django_settings, "CC_BILLING_SETTINGS_REQUIRED", False))


def get_billing_settings(*, key: str = GLOBAL_SETTINGS_KEY) -> BillingSettings:
    """
    Loads the settings document and overlays it on the defaults.

    Missing document:
    - CC_BILLING_SETTINGS_REQUIRED=False (default): built-in defaults
    - CC_BILLING_SETTINGS_REQUIRED=True: NotFound
    """
    row = ClinicSettings.objects.filter(key=key).only("values").first()
    if row is None:
        if _settings_required():
            raise NotFound(f"Settings document '{key}' not found.")
        return BillingSettings()
    return BillingSettings.from_mapping(row.values)
