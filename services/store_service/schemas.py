"""Pydantic schemas for store service.

JSON bodies use camelCase keys (``subTotal``, ``discountAmount``); requests
may also send the snake_case field names.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from libs.auth.models import Role
from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from services.store_service.models import OrderStatus


class StoreSchema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class StoreUpdateSchema(StoreSchema):
    """Partial update body.

    Fields may be left out, but the ones named in ``not_nullable`` cannot be
    sent as an explicit null since their columns have no empty value.
    """

    not_nullable: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        for name in self.not_nullable:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self


# ============================================================================
# AUTH & USER SCHEMAS
# ============================================================================


class RegisterRequest(StoreSchema):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=1)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class LoginRequest(StoreSchema):
    email: EmailStr
    password: str


class UserResponse(StoreSchema):
    id: uuid.UUID
    email: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Role
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None


class AuthResponse(StoreSchema):
    token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse


class EmployeeCreateRequest(StoreSchema):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=1)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class UserCreateRequest(EmployeeCreateRequest):
    role: Role = Role.SHOPPER

    @field_validator("role", mode="before")
    @classmethod
    def parse_role(cls, v):
        return Role.parse(v)


class UserUpdateRequest(StoreUpdateSchema):
    not_nullable = ("email", "role", "is_active")

    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    password: Optional[str] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None

    @field_validator("role", mode="before")
    @classmethod
    def parse_role(cls, v):
        return None if v is None else Role.parse(v)


class UserDeleteRequest(StoreSchema):
    usernames: list[str] = Field(..., min_length=1)


class UserDeleteResponse(StoreSchema):
    deleted: list[str]
    not_found: list[str]


# ============================================================================
# CATEGORY SCHEMAS
# ============================================================================


class CategoryBase(StoreSchema):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1024)
    is_active: bool = True


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(StoreUpdateSchema):
    not_nullable = ("name", "is_active")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1024)
    is_active: Optional[bool] = None


class CategoryResponse(CategoryBase):
    id: uuid.UUID
    external_source: Optional[str] = None
    external_id: Optional[str] = None
    product_count: int = 0
    created_at: datetime
    updated_at: datetime


# ============================================================================
# PRODUCT SCHEMAS
# ============================================================================


class ProductBase(StoreSchema):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=18, decimal_places=2)
    image_url: Optional[str] = Field(None, max_length=1024)
    category_id: uuid.UUID
    stock_quantity: int = Field(0, ge=0)
    is_active: bool = True


class ProductCreate(ProductBase):
    pass


class ProductUpdate(StoreUpdateSchema):
    not_nullable = ("title", "price", "category_id", "stock_quantity", "is_active")

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=18, decimal_places=2)
    image_url: Optional[str] = Field(None, max_length=1024)
    category_id: Optional[uuid.UUID] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ProductResponse(ProductBase):
    id: uuid.UUID
    category_name: Optional[str] = None
    average_rating: Decimal = Decimal("0")
    review_count: int = 0
    external_source: Optional[str] = None
    external_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProductListResponse(StoreSchema):
    items: list[ProductResponse]
    total: int
    page: int
    page_size: int


# ============================================================================
# SYNC SCHEMAS
# ============================================================================


class SyncResponse(StoreSchema):
    message: str
    count: int
    error: Optional[str] = None


class FakeStoreRatingResponse(StoreSchema):
    rate: Decimal
    count: int


class FakeStoreProductResponse(StoreSchema):
    id: int
    title: str
    price: Decimal
    description: str
    category: str
    image: str
    rating: Optional[FakeStoreRatingResponse] = None


# ============================================================================
# CART SCHEMAS
# ============================================================================


class CartItemCreate(StoreSchema):
    product_id: uuid.UUID
    quantity: int = 1


class CartItemUpdate(StoreSchema):
    quantity: int


class CartItemResponse(StoreSchema):
    product_id: uuid.UUID
    product_title: Optional[str] = None
    image_url: Optional[str] = None
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    added_at: datetime


class CartResponse(StoreSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    items: list[CartItemResponse] = []
    item_count: int = 0
    sub_total: Decimal
    discount_amount: Decimal = Decimal("0")
    total: Decimal
    updated_at: datetime


class CalculateTotalRequest(StoreSchema):
    coupon_code: Optional[str] = Field(None, max_length=50)


class CartTotalResponse(StoreSchema):
    sub_total: Decimal
    discount_amount: Decimal
    total: Decimal
    coupon_code: Optional[str] = None
    coupon_applied: bool = False


# ============================================================================
# COUPON SCHEMAS
# ============================================================================


class CouponBase(StoreSchema):
    code: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    discount_percentage: Decimal = Field(..., max_digits=5, decimal_places=2)
    max_discount_amount: Optional[Decimal] = Field(None, ge=0)
    minimum_order_amount: Optional[Decimal] = Field(None, ge=0)
    valid_from: datetime
    valid_to: datetime
    usage_limit: int = Field(..., ge=1)
    is_active: bool = True


class CouponCreate(CouponBase):
    pass


class CouponUpdate(StoreUpdateSchema):
    not_nullable = (
        "discount_percentage",
        "valid_from",
        "valid_to",
        "usage_limit",
        "is_active",
    )

    description: Optional[str] = None
    discount_percentage: Optional[Decimal] = Field(
        None, max_digits=5, decimal_places=2
    )
    max_discount_amount: Optional[Decimal] = Field(None, ge=0)
    minimum_order_amount: Optional[Decimal] = Field(None, ge=0)
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    usage_limit: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class CouponResponse(CouponBase):
    id: uuid.UUID
    used_count: int
    created_at: datetime


class CouponPreviewRequest(StoreSchema):
    code: str = Field(..., min_length=1, max_length=50)
    sub_total: Decimal = Field(..., ge=0)


class CouponPreviewResponse(StoreSchema):
    valid: bool
    code: str
    discount_percentage: Optional[Decimal] = None
    discount_amount: Decimal = Decimal("0")
    message: Optional[str] = None


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class OrderCreate(StoreSchema):
    shipping_address: Optional[str] = None
    coupon_code: Optional[str] = Field(None, max_length=50)


class OrderItemResponse(StoreSchema):
    product_id: uuid.UUID
    product_title: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class OrderResponse(StoreSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    order_date: datetime
    status: OrderStatus
    sub_total: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    coupon_code: Optional[str] = None
    shipping_address: Optional[str] = None
    is_paid: bool
    items: list[OrderItemResponse] = []


class OrderStatusUpdate(StoreSchema):
    status: OrderStatus


# ============================================================================
# REVIEW & WISHLIST SCHEMAS
# ============================================================================


class ReviewCreate(StoreSchema):
    product_id: uuid.UUID
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewUpdate(StoreUpdateSchema):
    not_nullable = ("rating",)

    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewResponse(StoreSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    product_id: uuid.UUID
    username: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    is_approved: bool
    created_at: datetime


class WishlistItemResponse(StoreSchema):
    product_id: uuid.UUID
    product_title: str
    price: Decimal
    image_url: Optional[str] = None
    added_at: datetime


class WishlistResponse(StoreSchema):
    items: list[WishlistItemResponse] = []
    count: int = 0


class WishlistExistsResponse(StoreSchema):
    product_id: uuid.UUID
    in_wishlist: bool


class MessageResponse(StoreSchema):
    message: str
