"""
Product repository over the CSV-backed FileBackedDB.

Filtering and sorting run in pandas with the same semantics the PostgREST
backend gets from Postgres (ILIKE search, NULLS LAST for rating/price).
"""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from beautyshelf.core.errors import RepositoryError
from beautyshelf.core.filters import ProductQuery
from beautyshelf.database import FileBackedDB
from beautyshelf.models.product import PRODUCT_COLUMNS, Product

logger = logging.getLogger(__name__)

TABLE = "products"


class FileProductRepository:

    def __init__(self, db: FileBackedDB, table: str = TABLE):
        self.db = db
        self.table = table

    def _owned(self, owner_id: str) -> List[Dict[str, Any]]:
        try:
            rows = self.db.list_records(self.table)
        except (OSError, ValueError) as e:
            raise RepositoryError(f"Failed to read {self.table}: {e}") from e
        return [Product.from_dict(r).to_dict() for r in rows if str(r.get("user_id") or "") == str(owner_id)]

    def insert(self, owner_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        record = {k: v for k, v in data.items() if k in PRODUCT_COLUMNS}
        record["user_id"] = owner_id
        record["created_at"] = datetime.now(timezone.utc).isoformat(sep=" ")
        record.pop("id", None)
        try:
            saved = self.db.create_record(self.table, record, id_field="id")
        except OSError as e:
            raise RepositoryError(f"Failed to insert product: {e}") from e
        return Product.from_dict(saved).to_dict()

    def get(self, owner_id: str, product_id: str) -> Optional[Dict[str, Any]]:
        try:
            row = self.db.get_record(self.table, {"id": product_id, "user_id": owner_id})
        except (OSError, ValueError) as e:
            raise RepositoryError(f"Failed to read product: {e}") from e
        return Product.from_dict(row).to_dict() if row else None

    def update(self, owner_id: str, product_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        clean = {k: v for k, v in updates.items() if k in PRODUCT_COLUMNS and k not in ("id", "user_id", "created_at")}
        try:
            row = self.db.update_record(self.table, {"id": product_id, "user_id": owner_id}, clean)
        except (OSError, ValueError) as e:
            raise RepositoryError(f"Failed to update product: {e}") from e
        return Product.from_dict(row).to_dict() if row else None

    def delete(self, owner_id: str, product_id: str) -> bool:
        try:
            return self.db.delete_record(self.table, {"id": product_id, "user_id": owner_id})
        except (OSError, ValueError) as e:
            raise RepositoryError(f"Failed to delete product: {e}") from e

    def query(self, owner_id: str, query: ProductQuery) -> Tuple[List[Dict[str, Any]], int]:
        records = self._owned(owner_id)
        df = pd.DataFrame(records, columns=PRODUCT_COLUMNS)

        if query.search:
            term = query.search
            mask = df["name"].fillna("").astype(str).str.contains(term, case=False, regex=False)
            mask |= df["brand"].fillna("").astype(str).str.contains(term, case=False, regex=False)
            df = df[mask]

        for column, value in query.equals.items():
            df = df[df[column].astype(object) == value]

        if query.min_rating:
            df = df[pd.to_numeric(df["rating"], errors="coerce") >= query.min_rating]

        sort = query.sort
        if sort.nulls_last:
            na_position = "last"
        else:
            # Postgres default: NULLS LAST ascending, NULLS FIRST descending
            na_position = "first" if sort.descending else "last"
        if sort.column in ("rating", "price"):
            key = lambda s: pd.to_numeric(s, errors="coerce")
        else:
            key = lambda s: s.astype(object).where(s.notna(), None).map(
                lambda v: v.lower() if isinstance(v, str) else v
            )
        df = df.sort_values(
            by=sort.column,
            ascending=not sort.descending,
            na_position=na_position,
            kind="mergesort",
            key=key,
        )

        total = len(df)
        positions = list(df.index)
        if query.limit is not None:
            positions = positions[query.offset: query.offset + query.limit]
        rows = [records[i] for i in positions]
        if query.columns:
            rows = [{c: r.get(c) for c in query.columns} for r in rows]
        return rows, total

    def distinct_values(self, owner_id: str, column: str) -> List[str]:
        values = {r.get(column) for r in self._owned(owner_id)}
        return sorted(str(v) for v in values if v not in (None, ""))
