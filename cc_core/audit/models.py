# cc_core/audit/models.py
from django.db import models

from cc_core.common.models import UUIDModel


class AuditEvent(UUIDModel):
    """
    Immutable audit record.
    Every financial transition of an invoice leaves one of these behind.
    """
    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "invoice.finalized"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "Invoice"
    entity_id = models.UUIDField(db_index=True)

    # external user id (string); "system" for unattended jobs
    actor_id = models.CharField(max_length=64, db_index=True, default="system")

    changed_fields = models.JSONField(default=list, blank=True)
    note = models.TextField(blank=True, default="")

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["event_code", "occurred_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.event_code} {self.entity_type}:{self.entity_id}"
