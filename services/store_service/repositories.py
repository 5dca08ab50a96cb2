"""Async repositories over the store tables.

Each repository wraps the request's ``AsyncSession``. Mutating helpers only
stage changes; the calling service decides when to commit.
"""

import uuid
from decimal import Decimal
from typing import Any, Generic, Optional, Sequence, TypeVar

from libs.db.base import Base
from services.store_service.models import (
    Cart,
    CartItem,
    Category,
    Coupon,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    Review,
    User,
    WishlistItem,
)
from sqlalchemy import Select, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """CRUD capability set shared by every store entity."""

    model: type[ModelT]

    def __init__(self, db: AsyncSession):
        self.db = db

    def _base_query(self) -> Select:
        return select(self.model)

    async def get_by_id(self, entity_id: uuid.UUID) -> Optional[ModelT]:
        result = await self.db.execute(
            self._base_query().where(self.model.id == entity_id)
        )
        return result.scalar_one_or_none()

    async def get_all(self, *, offset: int = 0, limit: Optional[int] = None) -> list[ModelT]:
        query = self._base_query().offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def add(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        await self.db.flush()
        return entity

    async def update(self, entity: ModelT, values: dict[str, Any]) -> ModelT:
        for field, value in values.items():
            setattr(entity, field, value)
        await self.db.flush()
        return entity

    async def delete(self, entity: ModelT) -> None:
        await self.db.delete(entity)
        await self.db.flush()

    async def exists(self, entity_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            select(func.count()).select_from(self.model).where(self.model.id == entity_id)
        )
        return result.scalar_one() > 0

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()


# ============================================================================
# CATALOG
# ============================================================================


class CategoryRepository(Repository[Category]):
    model = Category

    async def get_by_name(self, name: str) -> Optional[Category]:
        result = await self.db.execute(
            select(Category).where(func.lower(Category.name) == name.lower())
        )
        return result.scalars().first()

    async def get_by_external_id(self, source: str, external_id: str) -> Optional[Category]:
        result = await self.db.execute(
            select(Category).where(
                Category.external_source == source,
                Category.external_id == external_id,
            )
        )
        return result.scalar_one_or_none()

    async def search(self, term: str) -> list[Category]:
        pattern = f"%{term.lower()}%"
        result = await self.db.execute(
            select(Category)
            .where(
                or_(
                    func.lower(Category.name).like(pattern),
                    func.lower(Category.description).like(pattern),
                )
            )
            .order_by(Category.name)
        )
        return list(result.scalars().all())

    async def product_counts(self) -> dict[uuid.UUID, int]:
        result = await self.db.execute(
            select(Product.category_id, func.count(Product.id))
            .where(Product.is_active.is_(True))
            .group_by(Product.category_id)
        )
        return {category_id: count for category_id, count in result.all()}

    async def has_products(self, category_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            select(func.count()).select_from(Product).where(Product.category_id == category_id)
        )
        return result.scalar_one() > 0


class ProductRepository(Repository[Product]):
    model = Product

    def _base_query(self) -> Select:
        return (
            select(Product)
            .options(selectinload(Product.category))
            .execution_options(populate_existing=True)
        )

    def _filtered(
        self,
        *,
        category_id: Optional[uuid.UUID] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        search: Optional[str] = None,
        include_inactive: bool = False,
    ) -> Select:
        query = self._base_query()
        if not include_inactive:
            query = query.where(Product.is_active.is_(True))
        if category_id:
            query = query.where(Product.category_id == category_id)
        if min_price is not None:
            query = query.where(Product.price >= min_price)
        if max_price is not None:
            query = query.where(Product.price <= max_price)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(
                    func.lower(Product.title).like(pattern),
                    func.lower(Product.description).like(pattern),
                )
            )
        return query

    async def list_products(
        self, *, offset: int = 0, limit: int = 20, **filters
    ) -> tuple[list[Product], int]:
        query = self._filtered(**filters)
        count_result = await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            query.order_by(Product.created_at.desc(), Product.title).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), total

    async def get_by_category(self, category_id: uuid.UUID) -> list[Product]:
        result = await self.db.execute(
            self._filtered(category_id=category_id).order_by(Product.title)
        )
        return list(result.scalars().all())

    async def get_by_external_id(self, source: str, external_id: str) -> Optional[Product]:
        result = await self.db.execute(
            select(Product).where(
                Product.external_source == source,
                Product.external_id == external_id,
            )
        )
        return result.scalar_one_or_none()

    async def reserve_stock(self, product_id: uuid.UUID, quantity: int) -> bool:
        """Atomically take ``quantity`` units. False when not enough are left."""
        result = await self.db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock_quantity >= quantity)
            .values(stock_quantity=Product.stock_quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def external_ids(self, source: str) -> set[str]:
        result = await self.db.execute(
            select(Product.external_id).where(Product.external_source == source)
        )
        return {external_id for external_id in result.scalars().all()}

    async def review_stats(
        self, product_ids: Sequence[uuid.UUID]
    ) -> dict[uuid.UUID, tuple[Decimal, int]]:
        """Average rating and count of approved reviews per product."""
        if not product_ids:
            return {}
        result = await self.db.execute(
            select(Review.product_id, func.avg(Review.rating), func.count(Review.id))
            .where(Review.product_id.in_(product_ids), Review.is_approved.is_(True))
            .group_by(Review.product_id)
        )
        return {
            product_id: (Decimal(str(avg)), count)
            for product_id, avg, count in result.all()
        }

    async def featured(self, limit: int = 8) -> list[Product]:
        """Best-rated active products that are in stock."""
        avg_rating = func.coalesce(
            select(func.avg(Review.rating))
            .where(Review.product_id == Product.id, Review.is_approved.is_(True))
            .correlate(Product)
            .scalar_subquery(),
            Product.external_rating,
            0,
        )
        result = await self.db.execute(
            self._base_query()
            .where(Product.is_active.is_(True), Product.stock_quantity > 0)
            .order_by(avg_rating.desc(), Product.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())


# ============================================================================
# CART
# ============================================================================


class CartRepository(Repository[Cart]):
    model = Cart

    def _base_query(self) -> Select:
        return (
            select(Cart)
            .options(selectinload(Cart.items).selectinload(CartItem.product))
            .execution_options(populate_existing=True)
        )

    async def get_active_cart_by_user(self, user_id: uuid.UUID) -> Optional[Cart]:
        result = await self.db.execute(
            self._base_query().where(Cart.user_id == user_id, Cart.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def get_cart_items(self, cart_id: uuid.UUID) -> list[CartItem]:
        result = await self.db.execute(
            select(CartItem)
            .where(CartItem.cart_id == cart_id)
            .options(selectinload(CartItem.product))
            .order_by(CartItem.added_at)
        )
        return list(result.scalars().all())

    @staticmethod
    def find_item(cart: Cart, product_id: uuid.UUID) -> Optional[CartItem]:
        return next((item for item in cart.items if item.product_id == product_id), None)


# ============================================================================
# COUPONS
# ============================================================================


class CouponRepository(Repository[Coupon]):
    model = Coupon

    async def get_by_code(self, code: str) -> Optional[Coupon]:
        result = await self.db.execute(
            select(Coupon)
            .where(Coupon.code == normalize_coupon_code(code))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_coupons(self) -> list[Coupon]:
        result = await self.db.execute(select(Coupon).order_by(Coupon.created_at.desc()))
        return list(result.scalars().all())

    async def redeem(self, coupon_id: uuid.UUID) -> bool:
        """Atomically consume one use. False when the limit is already reached."""
        result = await self.db.execute(
            update(Coupon)
            .where(Coupon.id == coupon_id, Coupon.used_count < Coupon.usage_limit)
            .values(used_count=Coupon.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


def normalize_coupon_code(code: str) -> str:
    return code.strip().upper()


# ============================================================================
# ORDERS
# ============================================================================


class OrderRepository(Repository[Order]):
    model = Order

    def _base_query(self) -> Select:
        return (
            select(Order)
            .options(selectinload(Order.items))
            .execution_options(populate_existing=True)
        )

    async def get_by_user(self, user_id: uuid.UUID) -> list[Order]:
        result = await self.db.execute(
            self._base_query().where(Order.user_id == user_id).order_by(Order.order_date.desc())
        )
        return list(result.scalars().all())

    async def get_by_status(self, status: OrderStatus) -> list[Order]:
        result = await self.db.execute(
            self._base_query().where(Order.status == status).order_by(Order.order_date.desc())
        )
        return list(result.scalars().all())

    async def add_items(self, items: Sequence[OrderItem]) -> None:
        self.db.add_all(items)
        await self.db.flush()


# ============================================================================
# REVIEWS & WISHLIST
# ============================================================================


class ReviewRepository(Repository[Review]):
    model = Review

    def _base_query(self) -> Select:
        return select(Review).options(selectinload(Review.user))

    async def get_by_product(self, product_id: uuid.UUID, *, approved_only: bool = True) -> list[Review]:
        query = self._base_query().where(Review.product_id == product_id)
        if approved_only:
            query = query.where(Review.is_approved.is_(True))
        result = await self.db.execute(query.order_by(Review.created_at.desc()))
        return list(result.scalars().all())

    async def get_by_user(self, user_id: uuid.UUID) -> list[Review]:
        result = await self.db.execute(
            self._base_query().where(Review.user_id == user_id).order_by(Review.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_pending(self) -> list[Review]:
        result = await self.db.execute(
            self._base_query().where(Review.is_approved.is_(False)).order_by(Review.created_at)
        )
        return list(result.scalars().all())

    async def get_user_review(self, user_id: uuid.UUID, product_id: uuid.UUID) -> Optional[Review]:
        result = await self.db.execute(
            select(Review).where(Review.user_id == user_id, Review.product_id == product_id)
        )
        return result.scalars().first()


class WishlistRepository(Repository[WishlistItem]):
    model = WishlistItem

    async def get_by_user(self, user_id: uuid.UUID) -> list[WishlistItem]:
        result = await self.db.execute(
            select(WishlistItem)
            .where(WishlistItem.user_id == user_id)
            .options(selectinload(WishlistItem.product))
            .order_by(WishlistItem.added_at.desc())
        )
        return list(result.scalars().all())

    async def get_item(self, user_id: uuid.UUID, product_id: uuid.UUID) -> Optional[WishlistItem]:
        result = await self.db.execute(
            select(WishlistItem).where(
                WishlistItem.user_id == user_id, WishlistItem.product_id == product_id
            )
        )
        return result.scalar_one_or_none()

    async def remove(self, user_id: uuid.UUID, product_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            delete(WishlistItem).where(
                WishlistItem.user_id == user_id, WishlistItem.product_id == product_id
            )
        )
        return result.rowcount > 0


# ============================================================================
# USERS
# ============================================================================


class UserRepository(Repository[User]):
    model = User

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.username == username.strip().lower())
        )
        return result.scalar_one_or_none()

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.created_at))
        return list(result.scalars().all())
