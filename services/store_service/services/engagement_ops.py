"""Product reviews and wishlists."""

import uuid

from libs.common.errors import ConflictError, ForbiddenError, NotFoundError
from libs.common.logging import get_logger
from services.store_service.models import Review, WishlistItem
from services.store_service.repositories import (
    ReviewRepository,
    WishlistRepository,
)
from services.store_service.schemas import ReviewCreate, ReviewUpdate
from services.store_service.services.catalog_ops import get_product
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


async def create_review(
    db: AsyncSession, *, user_id: uuid.UUID, payload: ReviewCreate
) -> Review:
    """New reviews wait for staff approval before they count."""
    await get_product(db, payload.product_id)
    repo = ReviewRepository(db)
    if await repo.get_user_review(user_id, payload.product_id):
        raise ConflictError("You have already reviewed this product")

    review = Review(
        user_id=user_id,
        product_id=payload.product_id,
        rating=payload.rating,
        comment=payload.comment,
        is_approved=False,
    )
    await repo.add(review)
    await db.commit()
    logger.info("Review %s submitted for product %s", review.id, payload.product_id)
    return await repo.get_by_id(review.id)


async def get_review(db: AsyncSession, review_id: uuid.UUID) -> Review:
    review = await ReviewRepository(db).get_by_id(review_id)
    if not review:
        raise NotFoundError("Review not found")
    return review


async def _own_review(db: AsyncSession, review_id: uuid.UUID, user_id: uuid.UUID) -> Review:
    review = await get_review(db, review_id)
    if review.user_id != user_id:
        raise ForbiddenError("You can only change your own reviews")
    return review


async def update_review(
    db: AsyncSession, *, review_id: uuid.UUID, user_id: uuid.UUID, payload: ReviewUpdate
) -> Review:
    """Edits send the review back to moderation."""
    review = await _own_review(db, review_id, user_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes:
        changes["is_approved"] = False
        await ReviewRepository(db).update(review, changes)
        await db.commit()
    return review


async def delete_review(
    db: AsyncSession, *, review_id: uuid.UUID, user_id: uuid.UUID
) -> None:
    review = await _own_review(db, review_id, user_id)
    await ReviewRepository(db).delete(review)
    await db.commit()


async def approve_review(db: AsyncSession, review_id: uuid.UUID) -> Review:
    review = await get_review(db, review_id)
    review.is_approved = True
    await db.commit()
    logger.info("Review %s approved", review_id)
    return review


# ---------------------------------------------------------------------------
# Wishlist
# ---------------------------------------------------------------------------


async def add_to_wishlist(
    db: AsyncSession, *, user_id: uuid.UUID, product_id: uuid.UUID
) -> WishlistItem:
    """Idempotent: adding a product twice returns the existing entry."""
    await get_product(db, product_id)
    repo = WishlistRepository(db)
    existing = await repo.get_item(user_id, product_id)
    if existing:
        return existing

    item = WishlistItem(user_id=user_id, product_id=product_id)
    try:
        await repo.add(item)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        existing = await repo.get_item(user_id, product_id)
        if existing is None:
            raise
        return existing
    return item


async def remove_from_wishlist(
    db: AsyncSession, *, user_id: uuid.UUID, product_id: uuid.UUID
) -> None:
    removed = await WishlistRepository(db).remove(user_id, product_id)
    if not removed:
        raise NotFoundError("Product is not in your wishlist")
    await db.commit()


async def list_wishlist(db: AsyncSession, *, user_id: uuid.UUID) -> list[WishlistItem]:
    return await WishlistRepository(db).get_by_user(user_id)


async def in_wishlist(
    db: AsyncSession, *, user_id: uuid.UUID, product_id: uuid.UUID
) -> bool:
    return await WishlistRepository(db).get_item(user_id, product_id) is not None
