from __future__ import annotations
import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from beautyshelf.api.schemas.product import (
    FilterOptions,
    InvalidPhotoUrl,
    PhotoVerificationReport,
    ProductCreate,
    ProductUpdate,
    RecentProduct,
)
from beautyshelf.core.errors import NotFound, RemoteOperationFailed, RepositoryError, ValidationFailed
from beautyshelf.core.filters import FilterState, ProductQuery, SortOrder, build_product_query
from beautyshelf.db.base import ProductRepository
from beautyshelf.models.product import Product
from beautyshelf.services.photos import PhotoService

logger = logging.getLogger(__name__)


class ProductService:
    """Owner-scoped product CRUD. Every method takes the authenticated owner's id."""

    def __init__(self, repo: ProductRepository, photos: PhotoService):
        self.repo = repo
        self.photos = photos

    def _check_photo_url(self, url: Optional[str]) -> None:
        if url is None:
            return
        valid, error = self.photos.check_photo_url(url)
        if not valid:
            raise ValidationFailed(f"Invalid photo URL: {error}")

    def create_product(self, owner_id: str, payload: ProductCreate) -> Product:
        data = payload.model_dump(mode="json")
        if not data.get("name"):
            raise ValidationFailed("Product name is required")
        self._check_photo_url(data.get("photo_url"))
        try:
            row = self.repo.insert(owner_id, data)
        except RepositoryError as e:
            logger.error("Error inserting product: %s", e)
            raise RemoteOperationFailed(f"Failed to add product: {e}") from e
        logger.info("Product created: %s", row.get("id"))
        return Product.from_dict(row)

    def get_product(self, owner_id: str, product_id: str) -> Product:
        try:
            row = self.repo.get(owner_id, product_id)
        except RepositoryError as e:
            raise RemoteOperationFailed(f"Failed to load product: {e}") from e
        if not row:
            raise NotFound("Product not found")
        return Product.from_dict(row)

    def update_product(self, owner_id: str, product_id: str, payload: ProductUpdate) -> Product:
        updates = payload.model_dump(mode="json", exclude_unset=True)
        if "name" in updates and not updates["name"]:
            raise ValidationFailed("Product name is required")
        self._check_photo_url(updates.get("photo_url"))
        if not updates:
            return self.get_product(owner_id, product_id)
        try:
            row = self.repo.update(owner_id, product_id, updates)
        except RepositoryError as e:
            logger.error("Error updating product: %s", e)
            raise RemoteOperationFailed(f"Failed to update product: {e}") from e
        if not row:
            raise NotFound("Product not found")
        return Product.from_dict(row)

    def delete_product(self, owner_id: str, product_id: str) -> Dict[str, Any]:
        product = self.get_product(owner_id, product_id)
        try:
            deleted = self.repo.delete(owner_id, product_id)
        except RepositoryError as e:
            logger.error("Error deleting product: %s", e)
            raise RemoteOperationFailed(f"Failed to delete product: {e}") from e
        if not deleted:
            raise NotFound("Product not found")
        if product.photo_url:
            # outcome only logged; the product row is already gone
            result = self.photos.delete_photo(product.photo_url, owner_id)
            logger.debug("Photo cleanup for %s: %s", product_id, result.detail)
        return {"ok": True, "id": product_id}

    def list_products(self, owner_id: str, filters: Optional[FilterState] = None,
                      limit: Optional[int] = None, offset: Optional[int] = None) -> Tuple[List[Product], int]:
        query = build_product_query(filters, limit=limit, offset=offset)
        try:
            rows, count = self.repo.query(owner_id, query)
        except RepositoryError as e:
            logger.error("Error fetching filtered products: %s", e)
            raise RemoteOperationFailed(f"Failed to fetch products: {e}") from e
        return [Product.from_dict(r) for r in rows], count

    def get_filter_options(self, owner_id: str) -> FilterOptions:
        try:
            return FilterOptions(
                categories=self.repo.distinct_values(owner_id, "category"),
                brands=self.repo.distinct_values(owner_id, "brand"),
                usage_statuses=self.repo.distinct_values(owner_id, "usage_status"),
            )
        except RepositoryError as e:
            logger.error("Error fetching filter options: %s", e)
            raise RemoteOperationFailed(f"Failed to fetch filter options: {e}") from e

    def verify_photo_associations(self, owner_id: str) -> PhotoVerificationReport:
        query = ProductQuery(columns=["id", "name", "photo_url", "created_at"],
                             sort=SortOrder("created_at", descending=True))
        try:
            rows, _ = self.repo.query(owner_id, query)
        except RepositoryError as e:
            logger.error("Error verifying photo associations: %s", e)
            raise RemoteOperationFailed(f"Failed to verify photos: {e}") from e
        products = [Product.from_dict(r) for r in rows]

        with_photos = [p for p in products if p.photo_url]
        invalid: List[InvalidPhotoUrl] = []
        hosts: Counter = Counter()
        for p in with_photos:
            valid, error = self.photos.check_photo_url(p.photo_url)
            if not valid:
                invalid.append(InvalidPhotoUrl(id=p.id, name=p.name, photo_url=p.photo_url, error=error))
            parsed = urlparse(p.photo_url)
            hosts[parsed.hostname if parsed.scheme and parsed.hostname else "invalid-url"] += 1

        recent = [
            RecentProduct(id=p.id, name=p.name, photo_url=p.photo_url,
                          created_at=p.created_at.isoformat(sep=" ") if p.created_at else None)
            for p in products[:10]
        ]
        return PhotoVerificationReport(
            total_products=len(products),
            products_with_photos=len(with_photos),
            products_without_photos=len(products) - len(with_photos),
            invalid_photo_urls=invalid,
            recent_products=recent,
            photo_url_patterns=dict(hosts),
        )
