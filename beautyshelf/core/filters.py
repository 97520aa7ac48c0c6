"""
Translate the inventory filter panel's state into a backend-neutral query.

The repositories (PostgREST and the CSV table) both consume `ProductQuery`;
neither knows about the "all"/0/blank sentinels the filter panel uses.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

ALL = "all"

# sort key -> (column, nulls_last)
SORT_COLUMNS = {
    "date_added": ("created_at", False),
    "rating": ("rating", True),
    "name": ("name", False),
    "price": ("price", True),
}


class FilterState(BaseModel):
    search: str = ""
    category: str = ALL
    brand: str = ALL
    rating: int = Field(0, ge=0, le=5)
    usage_status: str = ALL
    sort_by: str = "date_added"
    sort_order: str = "desc"


@dataclass
class SortOrder:
    column: str = "created_at"
    descending: bool = True
    nulls_last: bool = False


@dataclass
class ProductQuery:
    search: Optional[str] = None
    equals: Dict[str, Any] = field(default_factory=dict)
    min_rating: Optional[int] = None
    sort: SortOrder = field(default_factory=SortOrder)
    offset: int = 0
    limit: Optional[int] = None
    columns: Optional[List[str]] = None

    @property
    def range_end(self) -> Optional[int]:
        """Inclusive end index of the requested page, None when unpaginated."""
        if self.limit is None:
            return None
        return self.offset + self.limit - 1


def _selector(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value or value == ALL:
        return None
    return value


def build_sort(sort_by: Optional[str], sort_order: Optional[str]) -> SortOrder:
    if sort_by not in SORT_COLUMNS:
        return SortOrder(column="created_at", descending=True, nulls_last=False)
    column, nulls_last = SORT_COLUMNS[sort_by]
    return SortOrder(column=column, descending=(sort_order or "desc") != "asc", nulls_last=nulls_last)


def build_product_query(filters: Optional[FilterState] = None, limit: Optional[int] = None,
                        offset: Optional[int] = None) -> ProductQuery:
    filters = filters or FilterState()
    query = ProductQuery()

    search = (filters.search or "").strip()
    if search:
        query.search = search

    for column, value in (
        ("category", filters.category),
        ("brand", filters.brand),
        ("usage_status", filters.usage_status),
    ):
        selected = _selector(value)
        if selected is not None:
            query.equals[column] = selected

    if filters.rating and filters.rating > 0:
        query.min_rating = int(filters.rating)

    query.sort = build_sort(filters.sort_by, filters.sort_order)

    if limit:
        query.limit = int(limit)
        query.offset = int(offset or 0)
    return query
