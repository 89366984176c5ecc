# cc_core/audit/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from uuid import UUID

from django.db import transaction

from cc_core.audit.models import AuditEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditRecord:
    event_code: str
    entity_type: str
    entity_id: UUID
    actor_id: str
    changed_fields: List[str] = field(default_factory=list)
    note: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


class AuditService:
    """
    Central audit writer (append-only).
    """

    @staticmethod
    @transaction.atomic
    def log(
        *,
        event_code: str,
        entity_type: str,
        entity_id: UUID,
        actor_id: str | None,
        changed_fields: Optional[List[str]] = None,
        note: str = "",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditRecord:
        changed_fields = list(changed_fields or [])
        metadata = metadata or {}
        actor_id = str(actor_id or "system")

        AuditEvent.objects.create(
            event_code=event_code,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_id=actor_id,
            changed_fields=changed_fields,
            note=note or "",
            metadata=metadata,
        )
        logger.debug("audit %s %s:%s by %s", event_code, entity_type, entity_id, actor_id)

        return AuditRecord(
            event_code=event_code,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_id=actor_id,
            changed_fields=changed_fields,
            note=note or "",
            metadata=metadata,
        )
