"""FastAPI application for the Store Service."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from libs.common.config import get_settings
from libs.common.errors import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.store_service.routers import (
    auth_router,
    cart_router,
    categories_router,
    coupons_router,
    orders_router,
    products_router,
    reviews_router,
    users_router,
    wishlist_router,
)

API_PREFIX = "/api"


def create_app() -> FastAPI:
    """Create and configure the Store Service FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="TechTrend Emporium Store API",
        version="1.0.0",
        description="E-commerce backend - catalog, cart pricing, coupons, orders and FakeStore import.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store"}

    # Identity
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(users_router, prefix=API_PREFIX)

    # Catalog
    app.include_router(categories_router, prefix=API_PREFIX)
    app.include_router(products_router, prefix=API_PREFIX)
    app.include_router(reviews_router, prefix=API_PREFIX)

    # Shopping
    app.include_router(cart_router, prefix=API_PREFIX)
    app.include_router(coupons_router, prefix=API_PREFIX)
    app.include_router(orders_router, prefix=API_PREFIX)
    app.include_router(wishlist_router, prefix=API_PREFIX)

    return app


app = create_app()
