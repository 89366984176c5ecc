# cc_core/clinic_settings/models.py
from __future__ import annotations

from django.db import models

from cc_core.common.models import TimeStampedModel

GLOBAL_SETTINGS_KEY = "global"


class ClinicSettings(TimeStampedModel):
    """
    Settings document. One row per key; billing reads the "global" row.

    `values` holds only the overrides; anything missing falls back to the
    built-in defaults in clinic_settings.types.BillingSettings.
    """
    key = models.SlugField(max_length=64, unique=True, default=GLOBAL_SETTINGS_KEY)
    values = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "clinic_settings"
        verbose_name_plural = "clinic settings"

    def __str__(self) -> str:
        return self.key
