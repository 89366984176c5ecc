from __future__ import annotations

from django.apps import AppConfig


class ClinicSettingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "cc_core.clinic_settings"
    verbose_name = "Clinic settings"
