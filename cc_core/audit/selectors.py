# cc_core/audit/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from cc_core.audit.models import AuditEvent

DEFAULT_LIMIT = 200
MAX_LIMIT = 500


def audit_events_qs() -> QuerySet[AuditEvent]:
    return AuditEvent.objects.all().order_by("-occurred_at")


def clamp_limit(raw) -> int:
    """Timelines can get huge: default 200, never more than 500."""
    try:
        n = int(raw) if raw not in (None, "") else DEFAULT_LIMIT
    except (TypeError, ValueError):
        n = DEFAULT_LIMIT
    return max(1, min(n, MAX_LIMIT))
