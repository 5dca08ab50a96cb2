"""Coupon administration and read-only coupon previews."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import as_utc
from libs.common.errors import ConflictError, NotFoundError, ValidationFailureError
from libs.common.logging import get_logger
from libs.common.money import ZERO
from services.store_service.models import Coupon
from services.store_service.repositories import CouponRepository, normalize_coupon_code
from services.store_service.schemas import (
    CouponCreate,
    CouponPreviewResponse,
    CouponUpdate,
)
from services.store_service.services.pricing import (
    calculate_discount,
    coupon_rejection_reason,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

MAX_DISCOUNT_PERCENTAGE = Decimal("100")


def validate_coupon_terms(
    *,
    discount_percentage: Decimal,
    valid_from: datetime,
    valid_to: datetime,
    usage_limit: int,
    used_count: int = 0,
) -> None:
    """Reject coupon terms that pricing must never see."""
    if discount_percentage <= 0 or discount_percentage > MAX_DISCOUNT_PERCENTAGE:
        raise ValidationFailureError(
            "Discount percentage must be greater than 0 and at most 100"
        )
    if as_utc(valid_to) < as_utc(valid_from):
        raise ValidationFailureError("validTo must not be earlier than validFrom")
    if usage_limit < used_count:
        raise ValidationFailureError(
            f"Usage limit cannot be lower than the {used_count} uses already made"
        )


async def get_coupon(db: AsyncSession, coupon_id: uuid.UUID) -> Coupon:
    coupon = await CouponRepository(db).get_by_id(coupon_id)
    if not coupon:
        raise NotFoundError("Coupon not found")
    return coupon


async def create_coupon(db: AsyncSession, payload: CouponCreate) -> Coupon:
    validate_coupon_terms(
        discount_percentage=payload.discount_percentage,
        valid_from=payload.valid_from,
        valid_to=payload.valid_to,
        usage_limit=payload.usage_limit,
    )
    repo = CouponRepository(db)
    code = normalize_coupon_code(payload.code)
    if await repo.get_by_code(code):
        raise ConflictError(f"Coupon code {code} already exists")

    coupon = Coupon(**payload.model_dump(exclude={"code"}), code=code, used_count=0)
    try:
        await repo.add(coupon)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Coupon code {code} already exists")

    logger.info("Created coupon %s (%s%%)", code, coupon.discount_percentage)
    return coupon


async def update_coupon(
    db: AsyncSession, coupon_id: uuid.UUID, payload: CouponUpdate
) -> Coupon:
    coupon = await get_coupon(db, coupon_id)
    changes = payload.model_dump(exclude_unset=True)

    validate_coupon_terms(
        discount_percentage=changes.get("discount_percentage", coupon.discount_percentage),
        valid_from=changes.get("valid_from", coupon.valid_from),
        valid_to=changes.get("valid_to", coupon.valid_to),
        usage_limit=changes.get("usage_limit", coupon.usage_limit),
        used_count=coupon.used_count,
    )

    await CouponRepository(db).update(coupon, changes)
    await db.commit()
    logger.info("Updated coupon %s: %s", coupon.code, sorted(changes))
    return coupon


async def delete_coupon(db: AsyncSession, coupon_id: uuid.UUID) -> None:
    coupon = await get_coupon(db, coupon_id)
    await CouponRepository(db).delete(coupon)
    await db.commit()
    logger.info("Deleted coupon %s", coupon.code)


async def preview_coupon(
    db: AsyncSession,
    *,
    code: str,
    sub_total: Decimal,
    now: Optional[datetime] = None,
) -> CouponPreviewResponse:
    """Check a code against a subtotal without consuming a use."""
    code = normalize_coupon_code(code)
    coupon = await CouponRepository(db).get_by_code(code)
    reason = coupon_rejection_reason(coupon, sub_total, now)
    if reason:
        return CouponPreviewResponse(
            valid=False,
            code=code,
            discount_percentage=coupon.discount_percentage if coupon else None,
            discount_amount=ZERO,
            message=reason,
        )

    return CouponPreviewResponse(
        valid=True,
        code=code,
        discount_percentage=coupon.discount_percentage,
        discount_amount=calculate_discount(coupon, sub_total),
        message=f"{coupon.discount_percentage}% discount applied",
    )
