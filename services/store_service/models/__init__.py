"""Store Service models package."""

from services.store_service.models.catalog import Category, Product
from services.store_service.models.commerce import (
    Cart,
    CartItem,
    Coupon,
    Order,
    OrderItem,
)
from services.store_service.models.engagement import Review, WishlistItem
from services.store_service.models.enums import FAKESTORE_SOURCE, OrderStatus
from services.store_service.models.users import User

__all__ = [
    "FAKESTORE_SOURCE",
    "Cart",
    "CartItem",
    "Category",
    "Coupon",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "Review",
    "User",
    "WishlistItem",
]
