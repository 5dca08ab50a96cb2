"""Store category router: browsing, management and FakeStore import."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from libs.auth.dependencies import require_admin, require_employee
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.repositories import CategoryRepository, ProductRepository
from services.store_service.routers._helpers import (
    build_category_response,
    build_product_responses,
)
from services.store_service.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ProductResponse,
    SyncResponse,
)
from services.store_service.services import catalog_ops
from services.store_service.services.fakestore_client import (
    FakeStoreClient,
    get_fakestore_client,
)
from services.store_service.services.sync import SyncResult, sync_categories
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/categories", tags=["categories"])


def sync_response(result: SyncResult, noun: str):
    """Render a sync outcome; upstream failures answer 502 with the error."""
    if result.ok:
        return SyncResponse(
            message=f"Successfully synced {result.imported_count} {noun} from FakeStore API",
            count=result.imported_count,
        )
    body = SyncResponse(
        message=f"Failed to sync {noun} from FakeStore API",
        count=0,
        error=result.error,
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=body.model_dump(mode="json", by_alias=True),
    )


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================


@router.get("", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_async_db)):
    repo = CategoryRepository(db)
    counts = await repo.product_counts()
    categories = sorted(await repo.get_all(), key=lambda c: c.name.lower())
    return [build_category_response(c, counts.get(c.id)) for c in categories]


@router.get("/search", response_model=list[CategoryResponse])
async def search_categories(
    term: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_async_db),
):
    repo = CategoryRepository(db)
    counts = await repo.product_counts()
    return [build_category_response(c, counts.get(c.id)) for c in await repo.search(term)]


@router.get("/fakestore", response_model=list[str])
async def list_fakestore_categories(
    client: FakeStoreClient = Depends(get_fakestore_client),
):
    """Remote category names; empty when FakeStore is unreachable."""
    return await client.get_categories()


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)):
    category = await catalog_ops.get_category(db, category_id)
    counts = await CategoryRepository(db).product_counts()
    return build_category_response(category, counts.get(category.id))


@router.get("/{category_id}/products", response_model=list[ProductResponse])
async def list_category_products(
    category_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)
):
    await catalog_ops.get_category(db, category_id)
    products = await ProductRepository(db).get_by_category(category_id)
    return await build_product_responses(db, products)


# ============================================================================
# STAFF ENDPOINTS
# ============================================================================


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    current_user: AuthUser = Depends(require_employee),
    db: AsyncSession = Depends(get_async_db),
):
    category = await catalog_ops.create_category(db, payload)
    return build_category_response(category)


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: uuid.UUID,
    payload: CategoryUpdate,
    current_user: AuthUser = Depends(require_employee),
    db: AsyncSession = Depends(get_async_db),
):
    category = await catalog_ops.update_category(db, category_id, payload)
    counts = await CategoryRepository(db).product_counts()
    return build_category_response(category, counts.get(category.id))


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Only empty categories can be deleted."""
    await catalog_ops.delete_category(db, category_id)


@router.post("/sync-from-fakestore", response_model=SyncResponse)
async def sync_from_fakestore(
    current_user: AuthUser = Depends(require_admin),
    client: FakeStoreClient = Depends(get_fakestore_client),
    db: AsyncSession = Depends(get_async_db),
):
    result = await sync_categories(db, client)
    return sync_response(result, "categories")
