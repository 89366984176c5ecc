from __future__ import annotations

from django.contrib import admin

from cc_core.sequences.models import Sequence


@admin.register(Sequence)
class SequenceAdmin(admin.ModelAdmin):
    list_display = ("key", "stream", "current", "updated_at")
    list_filter = ("stream",)
    search_fields = ("key",)
    # counters are moved by the allocator only
    readonly_fields = ("key", "stream", "current", "created_at", "updated_at")
    ordering = ("-updated_at",)

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
