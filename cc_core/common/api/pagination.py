# cc_core/common/api/pagination.py
from __future__ import annotations

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    page_size = 25
    page_size_query_param = "page_size"
    max_page_size = 200


def paginate(request, queryset, serializer_class, *, paginator: PageNumberPagination | None = None) -> Response:
    """
    List endpoints (invoices) return { count, next, previous, results }.
    Falls back to a bare list when the paginator declines the queryset.
    """
    pager = paginator or DefaultPagination()
    page = pager.paginate_queryset(queryset, request)
    if page is None:
        return Response(serializer_class(queryset, many=True).data)
    return pager.get_paginated_response(serializer_class(page, many=True).data)
