from __future__ import annotations

from django.contrib import admin

from cc_core.clinic_settings.models import ClinicSettings


@admin.register(ClinicSettings)
class ClinicSettingsAdmin(admin.ModelAdmin):
    list_display = ("key", "updated_at")
    search_fields = ("key",)
    ordering = ("key",)
