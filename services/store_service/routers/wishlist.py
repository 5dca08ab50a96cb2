"""Store wishlist router."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.routers._helpers import build_wishlist_response
from services.store_service.schemas import WishlistExistsResponse, WishlistResponse
from services.store_service.services import engagement_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/wishlist", tags=["wishlist"])


@router.get("", response_model=WishlistResponse)
async def get_wishlist(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    items = await engagement_ops.list_wishlist(db, user_id=current_user.user_id)
    return build_wishlist_response(items)


@router.post("/{product_id}", response_model=WishlistResponse)
async def add_to_wishlist(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await engagement_ops.add_to_wishlist(
        db, user_id=current_user.user_id, product_id=product_id
    )
    items = await engagement_ops.list_wishlist(db, user_id=current_user.user_id)
    return build_wishlist_response(items)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_wishlist(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await engagement_ops.remove_from_wishlist(
        db, user_id=current_user.user_id, product_id=product_id
    )


@router.get("/{product_id}/exists", response_model=WishlistExistsResponse)
async def wishlist_contains(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    found = await engagement_ops.in_wishlist(
        db, user_id=current_user.user_id, product_id=product_id
    )
    return WishlistExistsResponse(product_id=product_id, in_wishlist=found)
