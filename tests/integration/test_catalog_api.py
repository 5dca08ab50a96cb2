"""Integration tests for category and product endpoints, including FakeStore sync."""

import uuid
from decimal import Decimal

import httpx
import pytest
from services.store_service.app.main import app
from services.store_service.models import Product
from services.store_service.services.fakestore_client import get_fakestore_client
from sqlalchemy import select

from tests.conftest import auth_user_for, override_auth
from tests.factories import ProductFactory, ReviewFactory
from tests.stubs import default_routes, make_fakestore_client


def _product_payload(category_id, **overrides):
    data = {
        "title": "Mechanical Keyboard",
        "description": "Tactile switches",
        "price": "89.90",
        "categoryId": str(category_id),
        "stockQuantity": 12,
    }
    data.update(overrides)
    return data


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_categories_with_product_counts(client, category, product):
    response = await client.get("/api/categories")

    assert response.status_code == 200
    [body] = response.json()
    assert body["name"] == "Electronics"
    assert body["productCount"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_employee_creates_category(client, employee):
    with override_auth(app, auth_user_for(employee)):
        response = await client.post(
            "/api/categories", json={"name": "Audio", "description": "Headphones"}
        )

    assert response.status_code == 201, response.text
    assert response.json()["name"] == "Audio"
    assert response.json()["productCount"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_shopper_cannot_create_category(client, shopper):
    with override_auth(app, auth_user_for(shopper)):
        response = await client.post("/api/categories", json={"name": "Audio"})
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_duplicate_category_name_conflicts(client, employee, category):
    with override_auth(app, auth_user_for(employee)):
        response = await client.post("/api/categories", json={"name": "electronics"})
    assert response.status_code == 409


@pytest.mark.asyncio
@pytest.mark.integration
async def test_search_categories(client, category):
    response = await client.get("/api/categories/search", params={"term": "electr"})
    assert [c["name"] for c in response.json()] == ["Electronics"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_category_with_products_cannot_be_deleted(client, admin, category, product):
    with override_auth(app, auth_user_for(admin)):
        response = await client.delete(f"/api/categories/{category.id}")
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_empty_category_is_deleted(client, admin, category):
    with override_auth(app, auth_user_for(admin)):
        response = await client.delete(f"/api/categories/{category.id}")
        missing = await client.get(f"/api/categories/{category.id}")

    assert response.status_code == 204
    assert missing.status_code == 404


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product(client, employee, category):
    with override_auth(app, auth_user_for(employee)):
        response = await client.post(
            "/api/products", json=_product_payload(category.id)
        )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["title"] == "Mechanical Keyboard"
    assert Decimal(data["price"]) == Decimal("89.90")
    assert data["categoryName"] == "Electronics"
    assert data["stockQuantity"] == 12


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product_in_unknown_category_is_400(client, employee):
    with override_auth(app, auth_user_for(employee)):
        response = await client.post(
            "/api/products", json=_product_payload(uuid.uuid4())
        )
    assert response.status_code == 400
    assert response.json()["detail"] == "Category does not exist"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_negative_price_is_rejected(client, employee, category):
    with override_auth(app, auth_user_for(employee)):
        response = await client.post(
            "/api/products", json=_product_payload(category.id, price="-1")
        )
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_products_filters_and_pages(client, db_session, category):
    db_session.add_all(
        [
            ProductFactory.create(category_id=category.id, title="Cheap Cable", price=Decimal("5.00")),
            ProductFactory.create(category_id=category.id, title="Mid Mouse", price=Decimal("25.00")),
            ProductFactory.create(category_id=category.id, title="Pricey Monitor", price=Decimal("300.00")),
            ProductFactory.create(category_id=category.id, title="Hidden", price=Decimal("20.00"), is_active=False),
        ]
    )
    await db_session.commit()

    response = await client.get(
        "/api/products", params={"minPrice": "10", "maxPrice": "400", "pageSize": 1}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["pageSize"] == 1
    assert len(data["items"]) == 1

    search = await client.get("/api/products", params={"search": "MOUSE"})
    assert [p["title"] for p in search.json()["items"]] == ["Mid Mouse"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_inverted_price_range_is_400(client):
    response = await client.get("/api/products", params={"minPrice": "50", "maxPrice": "10"})
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_product_rating_uses_approved_reviews(
    client, db_session, shopper, employee, product
):
    db_session.add_all(
        [
            ReviewFactory.create(user_id=shopper.id, product_id=product.id, rating=4),
            ReviewFactory.create(
                user_id=employee.id, product_id=product.id, rating=1, is_approved=False
            ),
        ]
    )
    await db_session.commit()

    response = await client.get(f"/api/products/{product.id}")

    assert response.status_code == 200
    assert Decimal(response.json()["averageRating"]) == Decimal("4")
    assert response.json()["reviewCount"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_product(client, employee, product):
    with override_auth(app, auth_user_for(employee)):
        response = await client.put(
            f"/api/products/{product.id}", json={"price": "120.50", "stockQuantity": 2}
        )

    assert response.status_code == 200, response.text
    assert Decimal(response.json()["price"]) == Decimal("120.50")
    assert response.json()["stockQuantity"] == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_product_is_soft(client, db_session, admin, product):
    with override_auth(app, auth_user_for(admin)):
        response = await client.delete(f"/api/products/{product.id}")
    assert response.status_code == 204

    assert (await client.get(f"/api/products/{product.id}")).status_code == 404
    row = await db_session.scalar(select(Product).where(Product.id == product.id))
    assert row is not None
    assert row.is_active is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_employee_cannot_delete_product(client, employee, product):
    with override_auth(app, auth_user_for(employee)):
        response = await client.delete(f"/api/products/{product.id}")
    assert response.status_code == 403


# ---------------------------------------------------------------------------
# FakeStore sync
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_sync_products_endpoint(client, admin, fakestore):
    with override_auth(app, auth_user_for(admin)):
        first = await client.post("/api/products/sync-fakestore")
        second = await client.post("/api/products/sync-fakestore")

    assert first.status_code == 200, first.text
    assert first.json()["count"] == 3
    assert first.json()["message"] == "Successfully synced 3 products from FakeStore API"
    assert second.json()["count"] == 0

    listing = await client.get("/api/products", params={"pageSize": 10})
    assert listing.json()["total"] == 3


@pytest.mark.asyncio
@pytest.mark.integration
async def test_sync_categories_endpoint(client, admin, fakestore):
    with override_auth(app, auth_user_for(admin)):
        response = await client.post("/api/categories/sync-from-fakestore")

    assert response.status_code == 200
    assert response.json()["count"] == 3
    names = [c["name"] for c in (await client.get("/api/categories")).json()]
    assert names == ["electronics", "jewelery", "men's clothing"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_sync_upstream_failure_is_502(client, admin):
    routes = default_routes()
    routes["/products"] = httpx.ConnectError("connection refused")
    failing_client, _ = make_fakestore_client(routes)
    app.dependency_overrides[get_fakestore_client] = lambda: failing_client

    with override_auth(app, auth_user_for(admin)):
        response = await client.post("/api/products/sync-fakestore")

    assert response.status_code == 502
    body = response.json()
    assert body["count"] == 0
    assert body["message"] == "Failed to sync products from FakeStore API"
    assert body["error"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_sync_requires_admin(client, employee, fakestore):
    with override_auth(app, auth_user_for(employee)):
        response = await client.post("/api/products/sync-fakestore")
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_fakestore_categories_passthrough(client, fakestore):
    response = await client.get("/api/categories/fakestore")
    assert response.status_code == 200
    assert response.json() == ["electronics", "jewelery", "men's clothing"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_product_rejects_null_price(client, employee, product):
    with override_auth(app, auth_user_for(employee)):
        response = await client.put(f"/api/products/{product.id}", json={"price": None})
        current = await client.get(f"/api/products/{product.id}")

    assert response.status_code == 422
    assert "price cannot be null" in response.text
    assert Decimal(current.json()["price"]) == Decimal("100.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_category_rejects_null_name(client, employee, category):
    with override_auth(app, auth_user_for(employee)):
        response = await client.put(f"/api/categories/{category.id}", json={"name": None})

    assert response.status_code == 422
