# cc_core/audit/api/serializers.py
from rest_framework import serializers

from cc_core.audit.models import AuditEvent


class AuditEventSerializer(serializers.ModelSerializer):
    # Keep API field name "timestamp", mapped to model field "occurred_at"
    timestamp = serializers.DateTimeField(source="occurred_at", read_only=True)

    class Meta:
        model = AuditEvent
        fields = [
            "id",
            "entity_type",
            "entity_id",
            "event_code",
            "actor_id",
            "changed_fields",
            "note",
            "timestamp",
            "metadata",
        ]
        read_only_fields = fields
