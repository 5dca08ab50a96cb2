"""Unit tests for checkout and order status management."""

import uuid
from decimal import Decimal

import pytest
from fastapi import HTTPException
from services.store_service.models import Cart, OrderStatus, Product
from services.store_service.repositories import CouponRepository, ProductRepository
from services.store_service.services.cart_ops import add_item, get_or_create_active_cart
from services.store_service.services.order_ops import (
    get_user_order,
    list_orders_by_status,
    list_user_orders,
    place_order,
    update_order_status,
)
from sqlalchemy import select

from tests.factories import CouponFactory, UserFactory


async def _coupon(db, **overrides):
    coupon = CouponFactory.create(**overrides)
    db.add(coupon)
    await db.commit()
    return coupon


# ---------------------------------------------------------------------------
# place_order
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_empty_cart_cannot_be_ordered(db_session, shopper):
    with pytest.raises(HTTPException) as exc:
        await place_order(db_session, user_id=shopper.id)
    assert exc.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.unit
async def test_place_order_snapshots_lines_and_decrements_stock(
    db_session, shopper, product
):
    await add_item(db_session, user_id=shopper.id, product_id=product.id, quantity=2)

    order = await place_order(
        db_session, user_id=shopper.id, shipping_address="1 Main St"
    )

    assert order.status == OrderStatus.PENDING
    assert order.sub_total == Decimal("200.00")
    assert order.total_amount == Decimal("200.00")
    assert order.shipping_address == "1 Main St"
    assert order.is_paid is False
    assert len(order.items) == 1
    assert order.items[0].product_title == "Laptop"
    assert order.items[0].total_price == Decimal("200.00")

    stock = await db_session.scalar(
        select(Product.stock_quantity).where(Product.id == product.id)
    )
    assert stock == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_place_order_retires_cart(db_session, shopper, product):
    await add_item(db_session, user_id=shopper.id, product_id=product.id, quantity=1)
    old_cart_id = (await get_or_create_active_cart(db_session, user_id=shopper.id)).id

    await place_order(db_session, user_id=shopper.id)

    old_cart = await db_session.get(Cart, old_cart_id)
    assert old_cart.is_active is False
    fresh = await get_or_create_active_cart(db_session, user_id=shopper.id)
    assert fresh.id != old_cart_id
    assert fresh.items == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_place_order_redeems_valid_coupon(db_session, shopper, product):
    coupon = await _coupon(db_session, code="WELCOME10", usage_limit=5)
    await add_item(db_session, user_id=shopper.id, product_id=product.id, quantity=4)

    order = await place_order(db_session, user_id=shopper.id, coupon_code="welcome10")

    assert order.coupon_code == "WELCOME10"
    assert order.discount_amount == Decimal("40.00")
    assert order.total_amount == Decimal("360.00")
    await db_session.refresh(coupon)
    assert coupon.used_count == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_invalid_coupon_is_ignored_at_checkout(db_session, shopper, product):
    coupon = await _coupon(db_session, code="BIGSPEND", minimum_order_amount=Decimal("1000"))
    await add_item(db_session, user_id=shopper.id, product_id=product.id, quantity=1)

    order = await place_order(db_session, user_id=shopper.id, coupon_code="BIGSPEND")

    assert order.coupon_code is None
    assert order.total_amount == Decimal("100.00")
    await db_session.refresh(coupon)
    assert coupon.used_count == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_coupon_usage_limit_holds_across_orders(db_session, category, product):
    coupon = await _coupon(db_session, code="ONCE", usage_limit=1)
    first, second = UserFactory.create(), UserFactory.create()
    db_session.add_all([first, second])
    await db_session.commit()

    for user in (first, second):
        await add_item(db_session, user_id=user.id, product_id=product.id, quantity=1)

    order_one = await place_order(db_session, user_id=first.id, coupon_code="ONCE")
    order_two = await place_order(db_session, user_id=second.id, coupon_code="ONCE")

    assert order_one.coupon_code == "ONCE"
    assert order_two.coupon_code is None
    assert order_two.total_amount == Decimal("100.00")
    await db_session.refresh(coupon)
    assert coupon.used_count == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_stock_shortfall_at_checkout_is_rejected(db_session, shopper, product):
    await add_item(db_session, user_id=shopper.id, product_id=product.id, quantity=3)
    product.stock_quantity = 2
    await db_session.commit()

    with pytest.raises(HTTPException) as exc:
        await place_order(db_session, user_id=shopper.id)
    assert exc.value.status_code == 400


# ---------------------------------------------------------------------------
# Reading orders
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_orders_are_scoped_to_owner(db_session, shopper, product):
    await add_item(db_session, user_id=shopper.id, product_id=product.id, quantity=1)
    order = await place_order(db_session, user_id=shopper.id)

    assert [o.id for o in await list_user_orders(db_session, user_id=shopper.id)] == [
        order.id
    ]
    with pytest.raises(HTTPException) as exc:
        await get_user_order(db_session, user_id=uuid.uuid4(), order_id=order.id)
    assert exc.value.status_code == 404


# ---------------------------------------------------------------------------
# update_order_status
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_status_moves_forward(db_session, shopper, product):
    await add_item(db_session, user_id=shopper.id, product_id=product.id, quantity=1)
    order = await place_order(db_session, user_id=shopper.id)

    for status in (OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
        order = await update_order_status(db_session, order_id=order.id, status=status)
    assert order.status == OrderStatus.DELIVERED

    delivered = await list_orders_by_status(db_session, OrderStatus.DELIVERED)
    assert [o.id for o in delivered] == [order.id]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_invalid_status_transition_is_rejected(db_session, shopper, product):
    await add_item(db_session, user_id=shopper.id, product_id=product.id, quantity=1)
    order = await place_order(db_session, user_id=shopper.id)

    with pytest.raises(HTTPException) as exc:
        await update_order_status(
            db_session, order_id=order.id, status=OrderStatus.DELIVERED
        )
    assert exc.value.status_code == 400


# ---------------------------------------------------------------------------
# Coupon redemption
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_stops_at_usage_limit(db_session):
    coupon = await _coupon(db_session, usage_limit=2, used_count=1)
    repo = CouponRepository(db_session)

    assert await repo.redeem(coupon.id) is True
    assert await repo.redeem(coupon.id) is False
    await db_session.commit()

    await db_session.refresh(coupon)
    assert coupon.used_count == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_lost_redemption_race_rolls_back_checkout(
    db_session, shopper, product, monkeypatch
):
    """Another checkout used the last redemption between pricing and commit."""
    user_id, product_id = shopper.id, product.id
    await _coupon(db_session, code="LAST", usage_limit=1)
    await add_item(db_session, user_id=user_id, product_id=product_id, quantity=1)

    async def _exhausted(self, coupon_id):
        return False

    monkeypatch.setattr(CouponRepository, "redeem", _exhausted)

    with pytest.raises(HTTPException) as exc:
        await place_order(db_session, user_id=user_id, coupon_code="LAST")
    assert exc.value.status_code == 409

    # The rollback expired every loaded row, so only captured ids are used below
    assert await list_user_orders(db_session, user_id=user_id) == []
    cart = await get_or_create_active_cart(db_session, user_id=user_id)
    assert len(cart.items) == 1
    stock = await db_session.scalar(
        select(Product.stock_quantity).where(Product.id == product_id)
    )
    assert stock == 5


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reserve_stock_never_goes_negative(db_session, product):
    product_id = product.id
    repo = ProductRepository(db_session)

    assert await repo.reserve_stock(product_id, 6) is False
    assert await repo.reserve_stock(product_id, 5) is True
    assert await repo.reserve_stock(product_id, 1) is False

    stock = await db_session.scalar(
        select(Product.stock_quantity).where(Product.id == product_id)
    )
    assert stock == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_stock_taken_by_concurrent_checkout_is_a_conflict(
    db_session, shopper, product, monkeypatch
):
    """Another checkout bought the last units between the stock check and commit."""
    user_id, product_id = shopper.id, product.id
    await add_item(db_session, user_id=user_id, product_id=product_id, quantity=5)

    async def _sold_out(self, product_id, quantity):
        return False

    monkeypatch.setattr(ProductRepository, "reserve_stock", _sold_out)

    with pytest.raises(HTTPException) as exc:
        await place_order(db_session, user_id=user_id)
    assert exc.value.status_code == 409
    assert "Laptop" in exc.value.detail

    assert await list_user_orders(db_session, user_id=user_id) == []
    cart = await get_or_create_active_cart(db_session, user_id=user_id)
    assert cart.is_active is True
    assert len(cart.items) == 1
