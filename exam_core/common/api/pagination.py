from __future__ import annotations

from typing import Any, Callable, Iterable

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    """
    ?page= (1-based) and ?limit=, counted over the same queryset.
    Contract: { data, pagination: {page, limit, total_pages, total_items, has_next, has_previous} }
    """
    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100

    def get_pagination_meta(self) -> dict[str, Any]:
        paginator = self.page.paginator
        return {
            "page": self.page.number,
            "limit": paginator.per_page,
            # Django reports one (empty) page for an empty result
            "total_pages": paginator.num_pages if paginator.count else 0,
            "total_items": paginator.count,
            "has_next": self.page.has_next(),
            "has_previous": self.page.has_previous(),
        }

    def get_paginated_response(self, data):
        return Response({"data": data, "pagination": self.get_pagination_meta()})


class QueuePagination(DefaultPagination):
    """Work queues (pending approvals, rejections) show a longer first page."""
    page_size = 50


def paginate(
    request,
    queryset,
    serialize: Callable[[Iterable[Any]], list],
    *,
    paginator: PageNumberPagination | None = None,
) -> Response:
    """
    Shared pagination helper so every list endpoint returns the same envelope.
    """
    p = paginator or DefaultPagination()
    page = p.paginate_queryset(queryset, request)
    return p.get_paginated_response(serialize(page))
