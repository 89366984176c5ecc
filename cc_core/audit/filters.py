# cc_core/audit/filters.py
from __future__ import annotations

import django_filters

from cc_core.audit.models import AuditEvent


class AuditEventFilter(django_filters.FilterSet):
    entity_type = django_filters.CharFilter()
    entity_id = django_filters.UUIDFilter()
    event_code = django_filters.CharFilter()
    actor_id = django_filters.CharFilter()
    occurred_from = django_filters.DateTimeFilter(field_name="occurred_at", lookup_expr="gte")
    occurred_to = django_filters.DateTimeFilter(field_name="occurred_at", lookup_expr="lte")

    class Meta:
        model = AuditEvent
        fields = ["entity_type", "entity_id", "event_code", "actor_id"]
