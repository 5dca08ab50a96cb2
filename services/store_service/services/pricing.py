"""Cart pricing: subtotal, coupon validity and discount.

Everything here is a pure function over amounts and a coupon snapshot.
Pricing a cart never touches ``Coupon.used_count``; usage is consumed only
when an order is placed (see ``order_ops.place_order``).
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Protocol

from libs.common.datetime_utils import as_utc, utc_now
from libs.common.money import ZERO, percent_of, to_money


class PricedLine(Protocol):
    quantity: int
    unit_price: Decimal


class CouponTerms(Protocol):
    discount_percentage: Decimal
    max_discount_amount: Optional[Decimal]
    minimum_order_amount: Optional[Decimal]
    valid_from: datetime
    valid_to: datetime
    usage_limit: int
    used_count: int
    is_active: bool


@dataclass(frozen=True)
class CartTotals:
    sub_total: Decimal
    discount_amount: Decimal
    total: Decimal
    coupon_code: Optional[str] = None
    coupon_applied: bool = False


def calculate_subtotal(lines: Iterable[PricedLine]) -> Decimal:
    """Exact sum of ``quantity * unit_price``."""
    sub_total = sum(
        (Decimal(line.unit_price) * line.quantity for line in lines), ZERO
    )
    return to_money(sub_total)


def coupon_rejection_reason(
    coupon: Optional[CouponTerms],
    sub_total: Decimal,
    now: Optional[datetime] = None,
) -> Optional[str]:
    """Return why ``coupon`` cannot be applied to ``sub_total``, or None if it can."""
    if coupon is None:
        return "Coupon not found"
    if not coupon.is_active:
        return "Coupon is not active"

    now = as_utc(now or utc_now())
    if now < as_utc(coupon.valid_from):
        return "Coupon is not yet valid"
    if now > as_utc(coupon.valid_to):
        return "Coupon has expired"
    if coupon.used_count >= coupon.usage_limit:
        return "Coupon usage limit reached"
    if (
        coupon.minimum_order_amount is not None
        and sub_total < coupon.minimum_order_amount
    ):
        return f"Minimum order amount is {to_money(coupon.minimum_order_amount)}"
    return None


def is_coupon_valid(
    coupon: Optional[CouponTerms], sub_total: Decimal, now: Optional[datetime] = None
) -> bool:
    return coupon_rejection_reason(coupon, sub_total, now) is None


def calculate_discount(coupon: CouponTerms, sub_total: Decimal) -> Decimal:
    """Percentage of the subtotal, capped at the coupon's maximum discount."""
    discount = percent_of(sub_total, coupon.discount_percentage)
    if coupon.max_discount_amount is not None:
        discount = min(discount, Decimal(coupon.max_discount_amount))
    return min(to_money(discount), sub_total)


def price_cart(
    lines: Iterable[PricedLine],
    coupon: Optional[CouponTerms] = None,
    *,
    coupon_code: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CartTotals:
    """Price a set of cart lines, applying ``coupon`` only when it is valid.

    An unknown or invalid coupon falls back to full price; it is never an error.
    """
    sub_total = calculate_subtotal(lines)
    discount = ZERO
    applied = False
    if coupon is not None and is_coupon_valid(coupon, sub_total, now):
        discount = calculate_discount(coupon, sub_total)
        applied = True

    return CartTotals(
        sub_total=sub_total,
        discount_amount=discount,
        total=sub_total - discount,
        coupon_code=coupon_code,
        coupon_applied=applied,
    )
