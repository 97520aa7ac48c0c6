# beautyshelf/models/product.py
from __future__ import annotations
import math
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, Tuple, List
from datetime import date, datetime


CATEGORIES: Tuple[str, ...] = (
    "Skincare",
    "Makeup",
    "Haircare",
    "Fragrance",
    "Body Care",
    "Supplements",
    "Tools & Accessories",
    "Other",
)

USAGE_STATUSES: Tuple[str, ...] = ("new", "in progress", "finished", "want to repurchase")
REPURCHASE_STATUS = "want to repurchase"

PRODUCT_COLUMNS: List[str] = [
    "id",
    "user_id",
    "name",
    "brand",
    "price",
    "category",
    "purchase_date",
    "photo_url",
    "usage_status",
    "rating",
    "created_at",
]

KANBAN_COLUMNS: List[str] = [
    "id", "name", "brand", "category", "rating", "price", "photo_url", "usage_status", "created_at",
]


def _blank_to_none(value: Any) -> Optional[str]:
    # pandas hands back float NaN for cells missing from a CSV row
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    s = str(value).strip()
    return s or None


def _parse_price(value: Any) -> Optional[float]:
    s = _blank_to_none(value)
    if s is None:
        return None
    try:
        price = float(s)
    except ValueError:
        return None
    return None if math.isnan(price) else price


def _parse_rating(value: Any) -> Optional[int]:
    s = _blank_to_none(value)
    if s is None:
        return None
    try:
        return int(float(s))
    except ValueError:
        return None


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = _blank_to_none(value)
    if s is None:
        return None
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    s = _blank_to_none(value)
    if s is None:
        return None
    # Postgres returns "...Z" / "+00:00" suffixes; the CSV table stores isoformat(sep=" ")
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        try:
            return datetime.strptime(s, "%Y-%m-%d %H:%M:%S")
        except ValueError:
            return None


@dataclass
class Product:
    """
    A product owned by exactly one user.

    Rows may come from the CSV table (everything a string) or from PostgREST
    (JSON types); `from_dict` normalises both shapes.
    """
    id: Optional[str] = None
    user_id: Optional[str] = None
    name: str = ""
    brand: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    purchase_date: Optional[date] = None
    photo_url: Optional[str] = None
    usage_status: Optional[str] = None
    rating: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Product":
        if d is None:
            raise ValueError("Cannot construct Product from None")
        return cls(
            id=_blank_to_none(d.get("id")),
            user_id=_blank_to_none(d.get("user_id")),
            name=str(d.get("name") or "").strip(),
            brand=_blank_to_none(d.get("brand")),
            price=_parse_price(d.get("price")),
            category=_blank_to_none(d.get("category")),
            purchase_date=_parse_date(d.get("purchase_date")),
            photo_url=_blank_to_none(d.get("photo_url")),
            usage_status=_blank_to_none(d.get("usage_status")),
            rating=_parse_rating(d.get("rating")),
            created_at=_parse_timestamp(d.get("created_at") or d.get("inserted_at")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["purchase_date"] = self.purchase_date.isoformat() if self.purchase_date else None
        out["created_at"] = self.created_at.isoformat(sep=" ") if self.created_at else None
        return out


@dataclass
class KanbanProduct:
    """Board projection of a Product; only `usage_status` is ever mutated."""
    id: str
    name: str
    usage_status: str = "new"
    brand: Optional[str] = None
    category: Optional[str] = None
    rating: Optional[int] = None
    price: Optional[float] = None
    photo_url: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "KanbanProduct":
        p = Product.from_dict(d)
        status = p.usage_status if p.usage_status in USAGE_STATUSES else "new"
        return cls(
            id=str(p.id or ""),
            name=p.name,
            usage_status=status,
            brand=p.brand,
            category=p.category,
            rating=p.rating,
            price=p.price,
            photo_url=p.photo_url,
            created_at=p.created_at.isoformat(sep=" ") if p.created_at else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
