"""Store product router: catalog browsing, product management and sync."""

import uuid
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_admin, require_employee
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.repositories import ProductRepository, ReviewRepository
from services.store_service.routers._helpers import (
    build_product_response,
    build_product_responses,
    build_review_response,
)
from services.store_service.routers.categories import sync_response
from services.store_service.schemas import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    ReviewResponse,
    SyncResponse,
)
from services.store_service.services import catalog_ops
from services.store_service.services.fakestore_client import (
    FakeStoreClient,
    get_fakestore_client,
)
from services.store_service.services.sync import sync_products
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/products", tags=["products"])


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================


@router.get("", response_model=ProductListResponse)
async def list_products(
    category_id: Optional[uuid.UUID] = Query(None, alias="categoryId"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, alias="pageSize", ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
):
    """List active products with optional filters."""
    products, total = await catalog_ops.list_products(
        db,
        page=page,
        page_size=page_size,
        category_id=category_id,
        min_price=min_price,
        max_price=max_price,
        search=search,
    )
    return ProductListResponse(
        items=await build_product_responses(db, products),
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/search", response_model=list[ProductResponse])
async def search_products(
    term: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_async_db),
):
    products, _ = await ProductRepository(db).list_products(limit=100, search=term)
    return await build_product_responses(db, products)


@router.get("/featured", response_model=list[ProductResponse])
async def featured_products(
    limit: int = Query(8, ge=1, le=50),
    db: AsyncSession = Depends(get_async_db),
):
    products = await ProductRepository(db).featured(limit)
    return await build_product_responses(db, products)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)):
    product = await catalog_ops.get_product(db, product_id)
    return await build_product_response(db, product)


@router.get("/{product_id}/reviews", response_model=list[ReviewResponse])
async def list_product_reviews(
    product_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)
):
    """Approved reviews only."""
    await catalog_ops.get_product(db, product_id)
    reviews = await ReviewRepository(db).get_by_product(product_id)
    return [build_review_response(r) for r in reviews]


# ============================================================================
# STAFF ENDPOINTS
# ============================================================================


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    current_user: AuthUser = Depends(require_employee),
    db: AsyncSession = Depends(get_async_db),
):
    product = await catalog_ops.create_product(db, payload)
    return await build_product_response(db, product)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    current_user: AuthUser = Depends(require_employee),
    db: AsyncSession = Depends(get_async_db),
):
    product = await catalog_ops.update_product(db, product_id, payload)
    return await build_product_response(db, product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Soft delete (the product is deactivated)."""
    await catalog_ops.deactivate_product(db, product_id)


@router.post("/sync-fakestore", response_model=SyncResponse)
async def sync_fakestore(
    current_user: AuthUser = Depends(require_admin),
    client: FakeStoreClient = Depends(get_fakestore_client),
    db: AsyncSession = Depends(get_async_db),
):
    result = await sync_products(db, client)
    return sync_response(result, "products")
