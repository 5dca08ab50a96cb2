"""Store cart router: the signed-in user's active cart and its pricing."""

import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.routers._helpers import (
    build_cart_response,
    build_totals_response,
)
from services.store_service.schemas import (
    CalculateTotalRequest,
    CartItemCreate,
    CartItemUpdate,
    CartResponse,
    CartTotalResponse,
)
from services.store_service.services import cart_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartResponse)
async def get_cart(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get the active cart, creating an empty one on first access."""
    cart = await cart_ops.get_cart_view(db, user_id=current_user.user_id)
    return build_cart_response(cart)


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    item_in: CartItemCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    cart = await cart_ops.add_item(
        db,
        user_id=current_user.user_id,
        product_id=item_in.product_id,
        quantity=item_in.quantity,
    )
    return build_cart_response(cart)


@router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: uuid.UUID,
    item_in: CartItemUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Set a line's quantity; zero or less removes the line."""
    cart = await cart_ops.update_item(
        db,
        user_id=current_user.user_id,
        product_id=product_id,
        quantity=item_in.quantity,
    )
    return build_cart_response(cart)


@router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    cart = await cart_ops.remove_item(
        db, user_id=current_user.user_id, product_id=product_id
    )
    return build_cart_response(cart)


@router.delete("", response_model=CartResponse)
async def clear_cart(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    cart = await cart_ops.clear_cart(db, user_id=current_user.user_id)
    return build_cart_response(cart)


@router.post("/calculate-total", response_model=CartTotalResponse)
async def calculate_total(
    request: Optional[CalculateTotalRequest] = Body(None),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Price the cart with an optional coupon. Never consumes coupon usage."""
    totals = await cart_ops.calculate_cart_total(
        db,
        user_id=current_user.user_id,
        coupon_code=request.coupon_code if request else None,
    )
    return build_totals_response(totals)
