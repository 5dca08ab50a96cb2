"""Store service routers package."""

from services.store_service.routers.auth import router as auth_router
from services.store_service.routers.cart import router as cart_router
from services.store_service.routers.categories import router as categories_router
from services.store_service.routers.coupons import router as coupons_router
from services.store_service.routers.orders import router as orders_router
from services.store_service.routers.products import router as products_router
from services.store_service.routers.reviews import router as reviews_router
from services.store_service.routers.users import router as users_router
from services.store_service.routers.wishlist import router as wishlist_router

__all__ = [
    "auth_router",
    "cart_router",
    "categories_router",
    "coupons_router",
    "orders_router",
    "products_router",
    "reviews_router",
    "users_router",
    "wishlist_router",
]
