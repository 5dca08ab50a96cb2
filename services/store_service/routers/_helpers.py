"""Shared response builders for store routers."""

from typing import Optional

from services.store_service.models import Cart, Category, Order, Product, Review, WishlistItem
from services.store_service.schemas import (
    CartItemResponse,
    CartResponse,
    CartTotalResponse,
    CategoryResponse,
    OrderResponse,
    ProductResponse,
    ReviewResponse,
    WishlistItemResponse,
    WishlistResponse,
)
from services.store_service.services.catalog_ops import product_ratings
from services.store_service.services.pricing import CartTotals, calculate_subtotal
from sqlalchemy.ext.asyncio import AsyncSession


def build_cart_response(cart: Cart) -> CartResponse:
    """Cart view priced without a coupon."""
    items = [
        CartItemResponse(
            product_id=item.product_id,
            product_title=item.product.title if item.product else None,
            image_url=item.product.image_url if item.product else None,
            quantity=item.quantity,
            unit_price=item.unit_price,
            line_total=item.unit_price * item.quantity,
            added_at=item.added_at,
        )
        for item in cart.items
    ]
    sub_total = calculate_subtotal(cart.items)
    return CartResponse(
        id=cart.id,
        user_id=cart.user_id,
        items=items,
        item_count=sum(item.quantity for item in cart.items),
        sub_total=sub_total,
        total=sub_total,
        updated_at=cart.updated_at,
    )


def build_totals_response(totals: CartTotals) -> CartTotalResponse:
    return CartTotalResponse(
        sub_total=totals.sub_total,
        discount_amount=totals.discount_amount,
        total=totals.total,
        coupon_code=totals.coupon_code,
        coupon_applied=totals.coupon_applied,
    )


async def build_product_responses(
    db: AsyncSession, products: list[Product]
) -> list[ProductResponse]:
    ratings = await product_ratings(db, products)
    responses = []
    for product in products:
        average, count = ratings[product.id]
        response = ProductResponse.model_validate(product)
        response.category_name = product.category.name if product.category else None
        response.average_rating = average
        response.review_count = count
        responses.append(response)
    return responses


async def build_product_response(db: AsyncSession, product: Product) -> ProductResponse:
    return (await build_product_responses(db, [product]))[0]


def build_category_response(
    category: Category, product_count: Optional[int] = None
) -> CategoryResponse:
    response = CategoryResponse.model_validate(category)
    response.product_count = product_count or 0
    return response


def build_order_response(order: Order) -> OrderResponse:
    return OrderResponse.model_validate(order)


def build_review_response(review: Review) -> ReviewResponse:
    response = ReviewResponse.model_validate(review)
    response.username = review.user.username if review.user else None
    return response


def build_wishlist_response(items: list[WishlistItem]) -> WishlistResponse:
    return WishlistResponse(
        items=[
            WishlistItemResponse(
                product_id=item.product_id,
                product_title=item.product.title,
                price=item.product.price,
                image_url=item.product.image_url,
                added_at=item.added_at,
            )
            for item in items
        ],
        count=len(items),
    )
