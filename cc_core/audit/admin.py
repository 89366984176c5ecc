# cc_core/audit/admin.py
from django.contrib import admin

from cc_core.audit.models import AuditEvent


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = (
        "event_code",
        "entity_type",
        "entity_id",
        "actor_id",
        "occurred_at",
    )
    list_filter = ("event_code", "entity_type")
    search_fields = ("event_code", "entity_type", "entity_id", "actor_id")
    readonly_fields = (
        "event_code",
        "entity_type",
        "entity_id",
        "actor_id",
        "changed_fields",
        "note",
        "metadata",
        "occurred_at",
    )
    ordering = ("-occurred_at",)

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
