# cc_core/sequences/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from cc_core.sequences.api.serializers import AllocatedNumberSerializer, NextNumberRequestSerializer
from cc_core.sequences.services import SequenceAllocator


class NumberingViewSet(viewsets.ViewSet):
    """
    Document numbers for non-invoice streams (dispense, lab orders, ...).
    Invoice numbers are minted by finalize, not here.
    """

    @extend_schema(
        tags=["Numbering"],
        request=NextNumberRequestSerializer,
        responses={200: AllocatedNumberSerializer},
    )
    @action(detail=False, methods=["post"], url_path="next")
    def next(self, request):
        ser = NextNumberRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        allocated = SequenceAllocator.next_for_stream(
            stream=ser.validated_data["stream"],
            when=ser.validated_data.get("date"),
        )
        return Response(AllocatedNumberSerializer(allocated).data, status=status.HTTP_200_OK)
