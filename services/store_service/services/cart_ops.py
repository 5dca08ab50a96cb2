"""Cart mutations for a user's single active cart.

Every mutation commits and returns the cart re-read from the database, so the
caller always sees its own writes.
"""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.errors import ConflictError, NotFoundError, ValidationFailureError
from libs.common.logging import get_logger
from services.store_service.models import Cart, CartItem, Product
from services.store_service.repositories import (
    CartRepository,
    CouponRepository,
    ProductRepository,
    normalize_coupon_code,
)
from services.store_service.services.pricing import CartTotals, price_cart
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


async def get_or_create_active_cart(db: AsyncSession, *, user_id: uuid.UUID) -> Cart:
    """Return the user's active cart, creating it on first access."""
    repo = CartRepository(db)
    cart = await repo.get_active_cart_by_user(user_id)
    if cart:
        return cart

    db.add(Cart(user_id=user_id))
    try:
        await db.commit()
    except IntegrityError:
        # Another request created the active cart first
        await db.rollback()
        logger.info("Concurrent cart creation for user %s, reusing winner", user_id)
    else:
        logger.info("Created active cart for user %s", user_id)

    cart = await repo.get_active_cart_by_user(user_id)
    if cart is None:
        raise ConflictError("Could not create cart, please retry")
    return cart


async def get_cart_view(db: AsyncSession, *, user_id: uuid.UUID) -> Cart:
    return await get_or_create_active_cart(db, user_id=user_id)


async def _save(db: AsyncSession, cart: Cart) -> Cart:
    cart.updated_at = utc_now()
    cart_id = cart.id
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Cart was modified by another request, please retry")

    reloaded = await CartRepository(db).get_by_id(cart_id)
    if reloaded is None:
        raise NotFoundError("Cart not found")
    return reloaded


def _ensure_available(product: Product, quantity: int) -> None:
    if not product.is_active:
        raise ValidationFailureError("Product is not available")
    if product.stock_quantity < quantity:
        raise ValidationFailureError(
            f"Insufficient stock. Only {product.stock_quantity} available"
        )


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def add_item(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    product_id: uuid.UUID,
    quantity: int,
) -> Cart:
    """Add ``quantity`` of a product, merging with an existing line.

    Stock is checked against the resulting line quantity and the unit price
    snapshot is refreshed to the product's current price.
    """
    if quantity <= 0:
        raise ValidationFailureError("Quantity must be greater than zero")

    product = await ProductRepository(db).get_by_id(product_id)
    if not product:
        raise NotFoundError("Product not found")

    cart = await get_or_create_active_cart(db, user_id=user_id)
    item = CartRepository.find_item(cart, product_id)
    new_quantity = quantity + (item.quantity if item else 0)
    _ensure_available(product, new_quantity)

    if item:
        item.quantity = new_quantity
        item.unit_price = product.price
    else:
        cart.items.append(
            CartItem(product_id=product.id, quantity=quantity, unit_price=product.price)
        )

    logger.info(
        "Cart %s: added %d x product %s (line qty=%d)",
        cart.id,
        quantity,
        product_id,
        new_quantity,
    )
    return await _save(db, cart)


async def update_item(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    product_id: uuid.UUID,
    quantity: int,
) -> Cart:
    """Set a line's quantity; zero or less removes it. The price snapshot is kept."""
    cart = await get_or_create_active_cart(db, user_id=user_id)
    item = CartRepository.find_item(cart, product_id)
    if not item:
        raise NotFoundError("Item not found in cart")

    if quantity <= 0:
        cart.items.remove(item)
        logger.info("Cart %s: removed product %s via zero quantity", cart.id, product_id)
    else:
        _ensure_available(item.product, quantity)
        item.quantity = quantity
        logger.info("Cart %s: product %s qty=%d", cart.id, product_id, quantity)

    return await _save(db, cart)


async def remove_item(
    db: AsyncSession, *, user_id: uuid.UUID, product_id: uuid.UUID
) -> Cart:
    cart = await get_or_create_active_cart(db, user_id=user_id)
    item = CartRepository.find_item(cart, product_id)
    if not item:
        raise NotFoundError("Item not found in cart")

    cart.items.remove(item)
    logger.info("Cart %s: removed product %s", cart.id, product_id)
    return await _save(db, cart)


async def clear_cart(db: AsyncSession, *, user_id: uuid.UUID) -> Cart:
    cart = await get_or_create_active_cart(db, user_id=user_id)
    cleared = len(cart.items)
    cart.items.clear()
    logger.info("Cart %s: cleared %d items", cart.id, cleared)
    return await _save(db, cart)


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------


async def calculate_cart_total(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    coupon_code: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CartTotals:
    """Price the active cart. Read-only: coupon usage is not consumed."""
    cart = await get_or_create_active_cart(db, user_id=user_id)

    coupon = None
    code = normalize_coupon_code(coupon_code) if coupon_code else None
    if code:
        coupon = await CouponRepository(db).get_by_code(code)

    return price_cart(cart.items, coupon, coupon_code=code, now=now)
