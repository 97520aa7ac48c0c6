# beautyshelf/api/routes/products.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from beautyshelf.api.deps import CurrentUser, get_current_user, get_product_service
from beautyshelf.api.schemas.product import (
    FilterOptions,
    PhotoVerificationReport,
    ProductCreate,
    ProductListOut,
    ProductOut,
    ProductUpdate,
)
from beautyshelf.core.filters import FilterState
from beautyshelf.models.product import Product
from beautyshelf.services.products import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


def _to_out(p: Product) -> ProductOut:
    d = p.to_dict()
    return ProductOut(**d)


@router.get("/", response_model=ProductListOut)
def list_products(
    search: str = "",
    category: str = "all",
    brand: str = "all",
    rating: int = Query(0, ge=0, le=5),
    usage_status: str = "all",
    sort_by: str = "date_added",
    sort_order: str = "desc",
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    user: CurrentUser = Depends(get_current_user),
    service: ProductService = Depends(get_product_service),
):
    """
    List the caller's products. Filter values of "all" (or rating 0) disable
    that filter; `count` is the total before pagination.
    """
    filters = FilterState(
        search=search,
        category=category,
        brand=brand,
        rating=rating,
        usage_status=usage_status,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    products, count = service.list_products(user.id, filters, limit=limit, offset=offset)
    return ProductListOut(products=[_to_out(p) for p in products], count=count)


@router.get("/filter-options", response_model=FilterOptions)
def filter_options(user: CurrentUser = Depends(get_current_user),
                   service: ProductService = Depends(get_product_service)):
    return service.get_filter_options(user.id)


@router.get("/photo-verification", response_model=PhotoVerificationReport)
def photo_verification(user: CurrentUser = Depends(get_current_user),
                       service: ProductService = Depends(get_product_service)):
    return service.verify_photo_associations(user.id)


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, user: CurrentUser = Depends(get_current_user),
                   service: ProductService = Depends(get_product_service)):
    return _to_out(service.create_product(user.id, payload))


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, user: CurrentUser = Depends(get_current_user),
                service: ProductService = Depends(get_product_service)):
    return _to_out(service.get_product(user.id, product_id))


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: str, payload: ProductUpdate, user: CurrentUser = Depends(get_current_user),
                   service: ProductService = Depends(get_product_service)):
    return _to_out(service.update_product(user.id, product_id, payload))


@router.delete("/{product_id}")
def delete_product(product_id: str, user: CurrentUser = Depends(get_current_user),
                   service: ProductService = Depends(get_product_service)):
    # the stored photo is removed best-effort after the row
    return service.delete_product(user.id, product_id)
