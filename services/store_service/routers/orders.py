"""Store orders router: checkout, order history and fulfilment status."""

import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, status
from libs.auth.dependencies import get_current_user, require_employee
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.models import OrderStatus
from services.store_service.routers._helpers import build_order_response
from services.store_service.schemas import OrderCreate, OrderResponse, OrderStatusUpdate
from services.store_service.services import order_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def place_order(
    order_in: Optional[OrderCreate] = Body(None),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Check out the active cart."""
    order_in = order_in or OrderCreate()
    order = await order_ops.place_order(
        db,
        user_id=current_user.user_id,
        shipping_address=order_in.shipping_address,
        coupon_code=order_in.coupon_code,
    )
    return build_order_response(order)


@router.get("", response_model=list[OrderResponse])
async def list_my_orders(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    orders = await order_ops.list_user_orders(db, user_id=current_user.user_id)
    return [build_order_response(o) for o in orders]


@router.get("/status/{order_status}", response_model=list[OrderResponse])
async def list_orders_by_status(
    order_status: OrderStatus,
    current_user: AuthUser = Depends(require_employee),
    db: AsyncSession = Depends(get_async_db),
):
    orders = await order_ops.list_orders_by_status(db, order_status)
    return [build_order_response(o) for o in orders]


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    order = await order_ops.get_user_order(
        db, user_id=current_user.user_id, order_id=order_id
    )
    return build_order_response(order)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: uuid.UUID,
    update: OrderStatusUpdate,
    current_user: AuthUser = Depends(require_employee),
    db: AsyncSession = Depends(get_async_db),
):
    order = await order_ops.update_order_status(
        db, order_id=order_id, status=update.status
    )
    return build_order_response(order)
