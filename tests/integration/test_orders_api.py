"""Integration tests for checkout and order endpoints."""

import uuid
from decimal import Decimal

import pytest
from services.store_service.app.main import app

from tests.conftest import auth_user_for, override_auth
from tests.factories import CouponFactory


async def _checkout(client, product, quantity=1, body=None):
    await client.post(
        "/api/cart/items", json={"productId": str(product.id), "quantity": quantity}
    )
    return await client.post("/api/orders", json=body)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_place_order_from_cart(client, shopper, product):
    with override_auth(app, auth_user_for(shopper)):
        response = await _checkout(
            client, product, quantity=2, body={"shippingAddress": "1 Main St"}
        )
        cart = await client.get("/api/cart")

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["status"] == "pending"
    assert Decimal(data["subTotal"]) == Decimal("200.00")
    assert Decimal(data["totalAmount"]) == Decimal("200.00")
    assert data["shippingAddress"] == "1 Main St"
    assert data["items"][0]["productTitle"] == "Laptop"
    assert cart.json()["items"] == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_place_order_without_body(client, shopper, product):
    with override_auth(app, auth_user_for(shopper)):
        response = await _checkout(client, product)
    assert response.status_code == 201, response.text


@pytest.mark.asyncio
@pytest.mark.integration
async def test_place_order_with_coupon(client, db_session, shopper, product):
    db_session.add(CouponFactory.create(code="WELCOME10", usage_limit=1))
    await db_session.commit()

    with override_auth(app, auth_user_for(shopper)):
        response = await _checkout(
            client, product, quantity=4, body={"couponCode": "welcome10"}
        )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["couponCode"] == "WELCOME10"
    assert Decimal(data["discountAmount"]) == Decimal("40.00")
    assert Decimal(data["totalAmount"]) == Decimal("360.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_empty_cart_checkout_is_400(client, shopper):
    with override_auth(app, auth_user_for(shopper)):
        response = await client.post("/api/orders")
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_orders_are_private(client, shopper, employee, product):
    with override_auth(app, auth_user_for(shopper)):
        order_id = (await _checkout(client, product)).json()["id"]
        mine = await client.get("/api/orders")
        own = await client.get(f"/api/orders/{order_id}")
    with override_auth(app, auth_user_for(employee)):
        other = await client.get(f"/api/orders/{order_id}")

    assert [o["id"] for o in mine.json()] == [order_id]
    assert own.status_code == 200
    assert other.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_employee_advances_order_status(client, shopper, employee, product):
    with override_auth(app, auth_user_for(shopper)):
        order_id = (await _checkout(client, product)).json()["id"]
        forbidden = await client.patch(
            f"/api/orders/{order_id}/status", json={"status": "processing"}
        )

    with override_auth(app, auth_user_for(employee)):
        processing = await client.patch(
            f"/api/orders/{order_id}/status", json={"status": "processing"}
        )
        invalid = await client.patch(
            f"/api/orders/{order_id}/status", json={"status": "pending"}
        )
        by_status = await client.get("/api/orders/status/processing")

    assert forbidden.status_code == 403
    assert processing.status_code == 200
    assert processing.json()["status"] == "processing"
    assert invalid.status_code == 400
    assert [o["id"] for o in by_status.json()] == [order_id]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_order_is_404(client, employee):
    with override_auth(app, auth_user_for(employee)):
        response = await client.patch(
            f"/api/orders/{uuid.uuid4()}/status", json={"status": "shipped"}
        )
    assert response.status_code == 404
