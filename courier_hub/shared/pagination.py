# courier_hub/shared/pagination.py
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from fastapi import Query as QueryParam
from sqlalchemy.orm import Query

from courier_hub.config.settings import settings


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    limit: int = 10

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def page_params(
    page: int = QueryParam(1, ge=1, description="Page number, starting at 1"),
    limit: int = QueryParam(settings.default_page_size, ge=1, description="Records per page"),
) -> PageParams:
    """Dependency for list endpoints"""
    return PageParams(page=page, limit=limit)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def pagination_meta(total: int, params: PageParams) -> Dict[str, int]:
    return {
        "total": total,
        "page": params.page,
        "limit": params.limit,
        "totalPages": total_pages(total, params.limit),
    }


def paginate(query: Query, params: PageParams) -> Tuple[List[Any], Dict[str, int]]:
    """Count, then fetch one page of an already filtered and ordered query"""
    total = query.order_by(None).count()
    items = query.offset(params.skip).limit(params.limit).all()
    return items, pagination_meta(total, params)


def paginate_items(items: List[Any], params: PageParams) -> Tuple[List[Any], Dict[str, int]]:
    """Same as ``paginate`` for a list already built in memory"""
    return items[params.skip:params.skip + params.limit], pagination_meta(len(items), params)
