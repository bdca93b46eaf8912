# hn_core/common/api/pagination.py
from __future__ import annotations

from rest_framework.pagination import PageNumberPagination


class DefaultPagination(PageNumberPagination):
    """
    Page-number pagination; the envelope also echoes the page and size used.
    """
    page_size = 25
    page_size_query_param = "page_size"
    max_page_size = 100

    def get_paginated_response(self, data):
        response = super().get_paginated_response(data)
        response.data["page"] = self.page.number
        response.data["page_size"] = self.get_page_size(self.request)
        return response

    def get_paginated_response_schema(self, schema):
        paginated = super().get_paginated_response_schema(schema)
        paginated["properties"]["page"] = {"type": "integer", "example": 1}
        paginated["properties"]["page_size"] = {"type": "integer", "example": self.page_size}
        return paginated
