"""Store reviews router."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user, require_employee
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.repositories import ReviewRepository
from services.store_service.routers._helpers import build_review_response
from services.store_service.schemas import ReviewCreate, ReviewResponse, ReviewUpdate
from services.store_service.services import engagement_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    review_in: ReviewCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    review = await engagement_ops.create_review(
        db, user_id=current_user.user_id, payload=review_in
    )
    return build_review_response(review)


@router.get("/mine", response_model=list[ReviewResponse])
async def my_reviews(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    reviews = await ReviewRepository(db).get_by_user(current_user.user_id)
    return [build_review_response(r) for r in reviews]


@router.get("/pending", response_model=list[ReviewResponse])
async def pending_reviews(
    current_user: AuthUser = Depends(require_employee),
    db: AsyncSession = Depends(get_async_db),
):
    reviews = await ReviewRepository(db).get_pending()
    return [build_review_response(r) for r in reviews]


@router.post("/{review_id}/approve", response_model=ReviewResponse)
async def approve_review(
    review_id: uuid.UUID,
    current_user: AuthUser = Depends(require_employee),
    db: AsyncSession = Depends(get_async_db),
):
    review = await engagement_ops.approve_review(db, review_id)
    return build_review_response(review)


@router.put("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: uuid.UUID,
    review_in: ReviewUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    review = await engagement_ops.update_review(
        db, review_id=review_id, user_id=current_user.user_id, payload=review_in
    )
    return build_review_response(review)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    review_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await engagement_ops.delete_review(
        db, review_id=review_id, user_id=current_user.user_id
    )
