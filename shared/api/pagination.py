"""Page/limit pagination producing the envelope ``pagination`` block."""

from __future__ import annotations

import math

from rest_framework.pagination import PageNumberPagination  # type: ignore

from .responses import success_response


class EnvelopePagination(PageNumberPagination):
    page_query_param = "page"
    page_size_query_param = "limit"
    page_size = 20
    max_page_size = 100

    def get_pagination_meta(self) -> dict[str, int | bool]:
        page = self.page.number
        limit = self.page.paginator.per_page
        total = self.page.paginator.count
        total_pages = math.ceil(total / limit) if limit else 0
        return {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": total_pages,
            "hasNext": self.page.has_next(),
            "hasPrev": self.page.has_previous(),
        }

    def get_paginated_response(self, data):  # type: ignore
        return success_response(data, pagination=self.get_pagination_meta())

    def get_paginated_response_schema(self, schema):  # type: ignore
        return {
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "message": {"type": "string"},
                "timestamp": {"type": "string", "format": "date-time"},
                "data": schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "page": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "total": {"type": "integer"},
                        "totalPages": {"type": "integer"},
                        "hasNext": {"type": "boolean"},
                        "hasPrev": {"type": "boolean"},
                    },
                },
            },
        }
