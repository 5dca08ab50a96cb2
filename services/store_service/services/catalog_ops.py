"""Category and product management."""

import uuid
from decimal import Decimal
from typing import Optional

from libs.common.errors import ConflictError, NotFoundError, ValidationFailureError
from libs.common.logging import get_logger
from services.store_service.models import Category, Product
from services.store_service.repositories import CategoryRepository, ProductRepository
from services.store_service.schemas import (
    CategoryCreate,
    CategoryUpdate,
    ProductCreate,
    ProductUpdate,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

RATING_PRECISION = Decimal("0.01")


# ============================================================================
# CATEGORIES
# ============================================================================


async def get_category(db: AsyncSession, category_id: uuid.UUID) -> Category:
    category = await CategoryRepository(db).get_by_id(category_id)
    if not category:
        raise NotFoundError("Category not found")
    return category


async def create_category(db: AsyncSession, payload: CategoryCreate) -> Category:
    repo = CategoryRepository(db)
    if await repo.get_by_name(payload.name):
        raise ConflictError(f"Category '{payload.name}' already exists")

    category = Category(**payload.model_dump())
    try:
        await repo.add(category)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Category '{payload.name}' already exists")

    logger.info("Created category %s", category.name)
    return category


async def update_category(
    db: AsyncSession, category_id: uuid.UUID, payload: CategoryUpdate
) -> Category:
    repo = CategoryRepository(db)
    category = await get_category(db, category_id)
    changes = payload.model_dump(exclude_unset=True)

    new_name = changes.get("name")
    if new_name and new_name.lower() != category.name.lower():
        clash = await repo.get_by_name(new_name)
        if clash and clash.id != category.id:
            raise ConflictError(f"Category '{new_name}' already exists")

    try:
        await repo.update(category, changes)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Category '{new_name}' already exists")
    return category


async def delete_category(db: AsyncSession, category_id: uuid.UUID) -> None:
    repo = CategoryRepository(db)
    category = await get_category(db, category_id)
    if await repo.has_products(category_id):
        raise ValidationFailureError(
            "Cannot delete a category that still has products"
        )
    await repo.delete(category)
    await db.commit()
    logger.info("Deleted category %s", category.name)


# ============================================================================
# PRODUCTS
# ============================================================================


async def get_product(
    db: AsyncSession, product_id: uuid.UUID, *, include_inactive: bool = False
) -> Product:
    product = await ProductRepository(db).get_by_id(product_id)
    if not product or (not product.is_active and not include_inactive):
        raise NotFoundError("Product not found")
    return product


async def _require_category(db: AsyncSession, category_id: uuid.UUID) -> None:
    if not await CategoryRepository(db).exists(category_id):
        raise ValidationFailureError("Category does not exist")


async def create_product(db: AsyncSession, payload: ProductCreate) -> Product:
    await _require_category(db, payload.category_id)

    product = Product(**payload.model_dump())
    await ProductRepository(db).add(product)
    await db.commit()
    logger.info("Created product %s (%s)", product.id, product.title)
    return await get_product(db, product.id, include_inactive=True)


async def update_product(
    db: AsyncSession, product_id: uuid.UUID, payload: ProductUpdate
) -> Product:
    product = await get_product(db, product_id, include_inactive=True)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("category_id"):
        await _require_category(db, changes["category_id"])

    await ProductRepository(db).update(product, changes)
    await db.commit()
    return await get_product(db, product_id, include_inactive=True)


async def deactivate_product(db: AsyncSession, product_id: uuid.UUID) -> None:
    """Soft delete: the row stays for order history and carts."""
    product = await get_product(db, product_id, include_inactive=True)
    product.is_active = False
    await db.commit()
    logger.info("Deactivated product %s", product_id)


async def product_ratings(
    db: AsyncSession, products: list[Product]
) -> dict[uuid.UUID, tuple[Decimal, int]]:
    """Rating and review count per product.

    Approved local reviews win over the imported rating for the average;
    the count adds both together.
    """
    stats = await ProductRepository(db).review_stats([p.id for p in products])
    ratings = {}
    for product in products:
        local_avg, local_count = stats.get(product.id, (None, 0))
        if local_count:
            average = local_avg
        elif product.external_rating is not None:
            average = Decimal(product.external_rating)
        else:
            average = Decimal("0")
        ratings[product.id] = (
            average.quantize(RATING_PRECISION),
            local_count + (product.external_rating_count or 0),
        )
    return ratings


async def list_products(
    db: AsyncSession,
    *,
    page: int = 1,
    page_size: int = 20,
    category_id: Optional[uuid.UUID] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    search: Optional[str] = None,
) -> tuple[list[Product], int]:
    if min_price is not None and max_price is not None and min_price > max_price:
        raise ValidationFailureError("minPrice cannot be greater than maxPrice")
    return await ProductRepository(db).list_products(
        offset=(page - 1) * page_size,
        limit=page_size,
        category_id=category_id,
        min_price=min_price,
        max_price=max_price,
        search=search,
    )
