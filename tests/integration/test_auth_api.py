"""Integration tests for registration, login and token handling.

These requests carry real bearer tokens instead of overriding auth.
"""

import pytest

from tests.factories import DEFAULT_PASSWORD, UserFactory


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Register / login
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_returns_token_and_shopper(client):
    response = await client.post(
        "/api/auth/register",
        json={
            "email": "Ana@Example.com",
            "username": "Ana_Shop",
            "password": "Secret12",
            "firstName": "Ana",
        },
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["token"]
    assert data["tokenType"] == "bearer"
    assert data["user"]["email"] == "ana@example.com"
    assert data["user"]["username"] == "ana_shop"
    assert data["user"]["firstName"] == "Ana"
    assert data["user"]["role"] == "shopper"
    assert "passwordHash" not in data["user"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_duplicate_email_conflicts(client, shopper):
    response = await client.post(
        "/api/auth/register",
        json={"email": shopper.email, "username": "someone_new", "password": "Secret12"},
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "Email is already registered"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_weak_password_is_rejected(client):
    response = await client.post(
        "/api/auth/register",
        json={"email": "weak@example.com", "username": "weakling", "password": "abc"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login_and_me(client, shopper):
    response = await client.post(
        "/api/auth/login", json={"email": shopper.email, "password": DEFAULT_PASSWORD}
    )
    assert response.status_code == 200, response.text
    token = response.json()["token"]

    me = await client.get("/api/auth/me", headers=_bearer(token))
    assert me.status_code == 200
    assert me.json()["id"] == str(shopper.id)
    assert me.json()["lastLoginAt"] is not None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login_wrong_password_is_401(client, shopper):
    response = await client.post(
        "/api/auth/login", json={"email": shopper.email, "password": "Wrong123"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login_deactivated_account_is_401(client, db_session):
    user = UserFactory.create(is_active=False)
    db_session.add(user)
    await db_session.commit()

    response = await client.post(
        "/api/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Account is deactivated"


# ---------------------------------------------------------------------------
# Token checks
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_protected_route_without_token_is_401(client):
    response = await client.get("/api/cart")
    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_garbage_token_is_401(client):
    response = await client.get("/api/auth/me", headers=_bearer("not-a-jwt"))
    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_shopper_token_cannot_reach_staff_route(client, shopper):
    login = await client.post(
        "/api/auth/login", json={"email": shopper.email, "password": DEFAULT_PASSWORD}
    )
    response = await client.get(
        "/api/coupons", headers=_bearer(login.json()["token"])
    )
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_refresh_issues_new_token_and_logout(client, shopper):
    login = await client.post(
        "/api/auth/login", json={"email": shopper.email, "password": DEFAULT_PASSWORD}
    )
    headers = _bearer(login.json()["token"])

    refreshed = await client.post("/api/auth/refresh", headers=headers)
    assert refreshed.status_code == 200
    assert refreshed.json()["token"]

    logout = await client.post("/api/auth/logout", headers=headers)
    assert logout.status_code == 200
    assert logout.json()["message"] == "Logged out"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "store"}
    assert response.headers["X-Request-ID"]
    assert float(response.headers["X-Process-Time-Ms"]) >= 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_incoming_request_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "trace-abc"})
    assert response.headers["X-Request-ID"] == "trace-abc"
