"""Seed script for store reference data.

Creates the base categories and the launch coupons (WELCOME10, SAVE15).
Existing rows are left alone, so the script can be re-run safely.

Usage:
    python -m services.store_service.seed_store_data
"""

import asyncio
from datetime import timedelta
from decimal import Decimal

from libs.common.datetime_utils import utc_now
from libs.db.config import AsyncSessionLocal
from services.store_service.models import Category, Coupon
from services.store_service.repositories import CategoryRepository, CouponRepository
from sqlalchemy.ext.asyncio import AsyncSession

CATEGORIES = [
    ("Electronics", "Electronic devices and gadgets"),
    ("Jewelery", "Jewelry and accessories"),
    ("Men's Clothing", "Men's fashion and clothing"),
    ("Women's Clothing", "Women's fashion and clothing"),
]


def launch_coupons() -> list[Coupon]:
    now = utc_now()
    return [
        Coupon(
            code="WELCOME10",
            description="Welcome discount - 10% off",
            discount_percentage=Decimal("10"),
            max_discount_amount=Decimal("50"),
            minimum_order_amount=Decimal("100"),
            valid_from=now,
            valid_to=now + timedelta(days=365),
            usage_limit=1000,
        ),
        Coupon(
            code="SAVE15",
            description="Save 15% on orders over $200",
            discount_percentage=Decimal("15"),
            max_discount_amount=Decimal("100"),
            minimum_order_amount=Decimal("200"),
            valid_from=now,
            valid_to=now + timedelta(days=365),
            usage_limit=500,
        ),
    ]


async def seed(db: AsyncSession) -> tuple[int, int]:
    """Insert missing categories and coupons. Returns (categories, coupons) added."""
    category_repo = CategoryRepository(db)
    coupon_repo = CouponRepository(db)

    categories_added = 0
    for name, description in CATEGORIES:
        if not await category_repo.get_by_name(name):
            db.add(Category(name=name, description=description))
            categories_added += 1

    coupons_added = 0
    for coupon in launch_coupons():
        if not await coupon_repo.get_by_code(coupon.code):
            db.add(coupon)
            coupons_added += 1

    await db.commit()
    return categories_added, coupons_added


async def seed_store_data():
    async with AsyncSessionLocal() as db:
        print("Seeding store data...")
        categories_added, coupons_added = await seed(db)
        print(f"Added {categories_added} categories and {coupons_added} coupons.")


if __name__ == "__main__":
    asyncio.run(seed_store_data())
