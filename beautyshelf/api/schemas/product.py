# beautyshelf/api/schemas/product.py
from datetime import date
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from beautyshelf.api.schemas.kanban import UsageStatus

Category = Literal[
    "Skincare",
    "Makeup",
    "Haircare",
    "Fragrance",
    "Body Care",
    "Supplements",
    "Tools & Accessories",
    "Other",
]


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class ProductBase(BaseModel):
    brand: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[Category] = None
    purchase_date: Optional[date] = None
    photo_url: Optional[str] = None
    usage_status: Optional[UsageStatus] = None
    rating: Optional[int] = Field(None, ge=1, le=5)

    @field_validator("brand", "category", "purchase_date", "photo_url", "usage_status", "price", "rating",
                     mode="before")
    @classmethod
    def _blank(cls, v):
        return _blank_to_none(v)


class ProductCreate(ProductBase):
    name: str = Field(..., min_length=1)

    @field_validator("name", mode="before")
    @classmethod
    def _trim_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class ProductUpdate(ProductBase):
    name: Optional[str] = Field(None, min_length=1)

    @field_validator("name", mode="before")
    @classmethod
    def _trim_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class ProductOut(BaseModel):
    id: str
    user_id: Optional[str] = None
    name: str
    brand: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    purchase_date: Optional[date] = None
    photo_url: Optional[str] = None
    usage_status: Optional[str] = None
    rating: Optional[int] = None
    created_at: Optional[str] = None


class ProductListOut(BaseModel):
    products: List[ProductOut]
    count: int


class FilterOptions(BaseModel):
    categories: List[str]
    brands: List[str]
    usage_statuses: List[str]


class InvalidPhotoUrl(BaseModel):
    id: str
    name: str
    photo_url: Optional[str] = None
    error: Optional[str] = None


class RecentProduct(BaseModel):
    id: str
    name: str
    photo_url: Optional[str] = None
    created_at: Optional[str] = None


class PhotoVerificationReport(BaseModel):
    total_products: int
    products_with_photos: int
    products_without_photos: int
    invalid_photo_urls: List[InvalidPhotoUrl]
    recent_products: List[RecentProduct]
    photo_url_patterns: Dict[str, int]
