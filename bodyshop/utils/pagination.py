import math
from dataclasses import dataclass
from typing import Any, Dict, List

from fastapi import Query

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass
class Pagination:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def get_pagination(
    page: int = Query(DEFAULT_PAGE),
    limit: int = Query(DEFAULT_LIMIT),
) -> Pagination:
    # out-of-range values are clamped, not rejected
    return Pagination(page=max(page, 1), limit=min(max(limit, 1), MAX_LIMIT))


def paginated_response(key: str, items: List[Any], pagination: Pagination, total: int) -> Dict[str, Any]:
    return {
        key: items,
        "pagination": {
            "total": total,
            "page": pagination.page,
            "limit": pagination.limit,
            "pages": math.ceil(total / pagination.limit),
        },
    }
