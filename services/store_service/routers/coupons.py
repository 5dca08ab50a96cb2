"""Store coupon router."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user, require_admin, require_employee
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.repositories import CouponRepository
from services.store_service.schemas import (
    CouponCreate,
    CouponPreviewRequest,
    CouponPreviewResponse,
    CouponResponse,
    CouponUpdate,
)
from services.store_service.services import coupon_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/coupons", tags=["coupons"])


@router.post("/preview", response_model=CouponPreviewResponse)
async def preview_coupon(
    request: CouponPreviewRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Check whether a code would apply to a subtotal. Usage is not consumed."""
    return await coupon_ops.preview_coupon(
        db, code=request.code, sub_total=request.sub_total
    )


@router.get("", response_model=list[CouponResponse])
async def list_coupons(
    current_user: AuthUser = Depends(require_employee),
    db: AsyncSession = Depends(get_async_db),
):
    return await CouponRepository(db).list_coupons()


@router.get("/{coupon_id}", response_model=CouponResponse)
async def get_coupon(
    coupon_id: uuid.UUID,
    current_user: AuthUser = Depends(require_employee),
    db: AsyncSession = Depends(get_async_db),
):
    return await coupon_ops.get_coupon(db, coupon_id)


@router.post("", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    payload: CouponCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await coupon_ops.create_coupon(db, payload)


@router.put("/{coupon_id}", response_model=CouponResponse)
async def update_coupon(
    coupon_id: uuid.UUID,
    payload: CouponUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await coupon_ops.update_coupon(db, coupon_id, payload)


@router.delete("/{coupon_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_coupon(
    coupon_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    await coupon_ops.delete_coupon(db, coupon_id)
