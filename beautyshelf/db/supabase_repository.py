"""
Product repository backed by the Supabase `products` table (PostgREST).

The caller's access token is forwarded to PostgREST so row-level security
applies on top of the explicit `user_id` filters added here.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Tuple

from supabase import Client

from beautyshelf.core.errors import RepositoryError
from beautyshelf.core.filters import ProductQuery, SortOrder
from beautyshelf.models.product import PRODUCT_COLUMNS

logger = logging.getLogger(__name__)

TABLE = "products"


def _quote(value: str) -> str:
    """Quote a value for a PostgREST logic-tree filter (commas and parens are reserved)."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def search_filter(term: str) -> str:
    pattern = _quote(f"%{term}%")
    return f"name.ilike.{pattern},brand.ilike.{pattern}"


def order_param(sort: SortOrder) -> str:
    value = f"{sort.column}.{'desc' if sort.descending else 'asc'}"
    if sort.nulls_last:
        value += ".nullslast"
    return value


def apply_product_query(builder, query: ProductQuery):
    """Apply every clause of `query` to a PostgREST select builder."""
    if query.search:
        builder = builder.or_(search_filter(query.search))
    for column, value in query.equals.items():
        builder = builder.eq(column, value)
    if query.min_rating:
        builder = builder.gte("rating", query.min_rating)
    # PostgREST order syntax; the python client only exposes `nullsfirst`
    builder.params = builder.params.add("order", order_param(query.sort))
    if query.limit is not None:
        builder = builder.range(query.offset, query.range_end)
    return builder


class SupabaseProductRepository:

    def __init__(self, client: Client, table: str = TABLE):
        self.client = client
        self.table = table

    def _execute(self, builder, action: str):
        try:
            return builder.execute()
        except Exception as e:
            logger.error("Supabase %s on %s failed: %s", action, self.table, e)
            message = getattr(e, "message", None) or str(e)
            raise RepositoryError(message) from e

    def insert(self, owner_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        record = {k: v for k, v in data.items() if k in PRODUCT_COLUMNS and k not in ("id", "created_at")}
        record["user_id"] = owner_id
        result = self._execute(self.client.table(self.table).insert(record), "insert")
        if not result.data:
            raise RepositoryError("Insert returned no row")
        return result.data[0]

    def get(self, owner_id: str, product_id: str) -> Optional[Dict[str, Any]]:
        builder = (
            self.client.table(self.table)
            .select("*")
            .eq("id", product_id)
            .eq("user_id", owner_id)
            .limit(1)
        )
        result = self._execute(builder, "select")
        return result.data[0] if result.data else None

    def update(self, owner_id: str, product_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        clean = {k: v for k, v in updates.items() if k in PRODUCT_COLUMNS and k not in ("id", "user_id", "created_at")}
        builder = (
            self.client.table(self.table)
            .update(clean)
            .eq("id", product_id)
            .eq("user_id", owner_id)
        )
        result = self._execute(builder, "update")
        return result.data[0] if result.data else None

    def delete(self, owner_id: str, product_id: str) -> bool:
        builder = (
            self.client.table(self.table)
            .delete()
            .eq("id", product_id)
            .eq("user_id", owner_id)
        )
        result = self._execute(builder, "delete")
        return bool(result.data)

    def query(self, owner_id: str, query: ProductQuery) -> Tuple[List[Dict[str, Any]], int]:
        columns = ", ".join(query.columns) if query.columns else "*"
        builder = self.client.table(self.table).select(columns, count="exact").eq("user_id", owner_id)
        builder = apply_product_query(builder, query)
        result = self._execute(builder, "select")
        rows = result.data or []
        return rows, result.count if result.count is not None else len(rows)

    def distinct_values(self, owner_id: str, column: str) -> List[str]:
        builder = (
            self.client.table(self.table)
            .select(column)
            .eq("user_id", owner_id)
            .not_.is_(column, "null")
        )
        result = self._execute(builder, "select")
        values = {row.get(column) for row in (result.data or [])}
        return sorted(str(v) for v in values if v)
