# cc_core/audit/api/views.py
from __future__ import annotations

from django_filters.utils import translate_validation
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from cc_core.audit.api.serializers import AuditEventSerializer
from cc_core.audit.filters import AuditEventFilter
from cc_core.audit.models import AuditEvent
from cc_core.audit.selectors import audit_events_qs, clamp_limit


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    Read-only invoice timeline. Filters: entity_type, entity_id, event_code,
    actor_id, occurred_from/occurred_to; `limit` caps the result.
    """
    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="entity_type", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="entity_id", type=OpenApiTypes.UUID, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="event_code", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="actor_id", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(
                name="limit",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Max records (default 200, max 500).",
            ),
        ],
    )
    def list(self, request, *args, **kwargs):
        fs = AuditEventFilter(data=request.query_params, queryset=audit_events_qs())
        if not fs.is_valid():
            raise translate_validation(fs.errors)

        rows = fs.qs[: clamp_limit(request.query_params.get("limit"))]
        return Response(AuditEventSerializer(rows, many=True).data, status=status.HTTP_200_OK)
