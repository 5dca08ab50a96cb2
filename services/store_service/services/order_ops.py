"""Checkout and order management.

``place_order`` is the only place coupon usage and stock are consumed. Both
are conditional ``UPDATE``s so concurrent checkouts cannot push ``used_count``
past ``usage_limit`` or ``stock_quantity`` below zero.
"""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.errors import ConflictError, NotFoundError, ValidationFailureError
from libs.common.logging import get_logger
from services.store_service.models import Order, OrderItem, OrderStatus
from services.store_service.repositories import (
    CouponRepository,
    OrderRepository,
    ProductRepository,
    normalize_coupon_code,
)
from services.store_service.services.cart_ops import get_or_create_active_cart
from services.store_service.services.pricing import price_cart
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Allowed forward moves; anything not listed is rejected.
STATUS_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


async def place_order(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    shipping_address: Optional[str] = None,
    coupon_code: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Order:
    """Turn the user's active cart into an order.

    Stock is decremented, the coupon (if it applies) is redeemed and the cart
    is retired. All of it commits together.
    """
    cart = await get_or_create_active_cart(db, user_id=user_id)
    if not cart.items:
        raise ValidationFailureError("Cannot place an order with an empty cart")

    for item in cart.items:
        product = item.product
        if not product.is_active:
            raise ValidationFailureError(f"Product {product.title} is no longer available")
        if product.stock_quantity < item.quantity:
            raise ValidationFailureError(
                f"Insufficient stock for {product.title}. "
                f"Only {product.stock_quantity} available"
            )

    coupon = None
    code = normalize_coupon_code(coupon_code) if coupon_code else None
    if code:
        coupon = await CouponRepository(db).get_by_code(code)

    totals = price_cart(cart.items, coupon, coupon_code=code, now=now)

    if totals.coupon_applied:
        redeemed = await CouponRepository(db).redeem(coupon.id)
        if not redeemed:
            await db.rollback()
            logger.warning("Coupon %s exhausted during checkout for %s", code, user_id)
            raise ConflictError(f"Coupon {code} has reached its usage limit")

    products = ProductRepository(db)
    for item in cart.items:
        title = item.product.title
        if not await products.reserve_stock(item.product_id, item.quantity):
            await db.rollback()
            logger.warning("Stock for %s ran out during checkout for %s", title, user_id)
            raise ConflictError(f"Insufficient stock for {title}")

    order = Order(
        user_id=user_id,
        status=OrderStatus.PENDING,
        sub_total=totals.sub_total,
        discount_amount=totals.discount_amount,
        total_amount=totals.total,
        coupon_code=code if totals.coupon_applied else None,
        shipping_address=shipping_address,
    )
    order.items = [
        OrderItem(
            product_id=item.product_id,
            product_title=item.product.title,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.unit_price * item.quantity,
        )
        for item in cart.items
    ]

    cart.is_active = False
    db.add(order)
    await db.commit()

    logger.info(
        "Order %s placed by %s",
        order.id,
        user_id,
        extra={
            "extra_fields": {
                "total": str(totals.total),
                "coupon": order.coupon_code,
                "items": len(order.items),
            }
        },
    )
    return await get_order(db, order.id)


async def get_order(db: AsyncSession, order_id: uuid.UUID) -> Order:
    order = await OrderRepository(db).get_by_id(order_id)
    if not order:
        raise NotFoundError("Order not found")
    return order


async def get_user_order(
    db: AsyncSession, *, user_id: uuid.UUID, order_id: uuid.UUID
) -> Order:
    order = await get_order(db, order_id)
    if order.user_id != user_id:
        raise NotFoundError("Order not found")
    return order


async def list_user_orders(db: AsyncSession, *, user_id: uuid.UUID) -> list[Order]:
    return await OrderRepository(db).get_by_user(user_id)


async def list_orders_by_status(db: AsyncSession, status: OrderStatus) -> list[Order]:
    return await OrderRepository(db).get_by_status(status)


async def update_order_status(
    db: AsyncSession, *, order_id: uuid.UUID, status: OrderStatus
) -> Order:
    order = await get_order(db, order_id)
    if status == order.status:
        return order
    if status not in STATUS_TRANSITIONS[order.status]:
        raise ValidationFailureError(
            f"Cannot move order from {order.status.value} to {status.value}"
        )

    previous = order.status
    order.status = status
    await db.commit()
    logger.info("Order %s status %s -> %s", order.id, previous.value, status.value)
    return await get_order(db, order_id)
