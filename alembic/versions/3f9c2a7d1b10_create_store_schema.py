"""create_store_schema

Revision ID: 3f9c2a7d1b10
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d1b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role_enum = sa.Enum(
    'shopper', 'employee', 'admin', 'super_admin', name='store_user_role_enum'
)
order_status_enum = sa.Enum(
    'pending', 'processing', 'shipped', 'delivered', 'cancelled',
    name='store_order_status_enum',
)


def upgrade() -> None:
    """Upgrade schema - Create store tables."""

    op.create_table(
        'store_users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', user_role_enum, nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_store_users'),
        sa.UniqueConstraint('email', name='uq_store_users_email'),
        sa.UniqueConstraint('username', name='uq_store_users_username'),
    )

    op.create_table(
        'store_categories',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(1024), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('external_source', sa.String(50), nullable=True),
        sa.Column('external_id', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_store_categories'),
        sa.UniqueConstraint('name', name='uq_store_categories_name'),
        sa.UniqueConstraint(
            'external_source', 'external_id', name='unique_category_external_ref'
        ),
    )

    op.create_table(
        'store_products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('category_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(18, 2), nullable=False),
        sa.Column('image_url', sa.String(1024), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), server_default='0', nullable=False),
        sa.Column('external_source', sa.String(50), nullable=True),
        sa.Column('external_id', sa.String(100), nullable=True),
        sa.Column('external_rating', sa.Numeric(3, 2), nullable=True),
        sa.Column('external_rating_count', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_store_products'),
        sa.ForeignKeyConstraint(
            ['category_id'], ['store_categories.id'],
            name='fk_store_products_category_id_store_categories',
        ),
        sa.UniqueConstraint(
            'external_source', 'external_id', name='unique_product_external_ref'
        ),
        sa.CheckConstraint('price >= 0', name='ck_store_products_non_negative_price'),
        sa.CheckConstraint(
            'stock_quantity >= 0', name='ck_store_products_non_negative_stock'
        ),
    )
    op.create_index(
        'ix_store_products_category_id', 'store_products', ['category_id']
    )

    op.create_table(
        'store_carts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_store_carts'),
        sa.ForeignKeyConstraint(
            ['user_id'], ['store_users.id'], name='fk_store_carts_user_id_store_users'
        ),
    )
    op.create_index('ix_store_carts_user_id', 'store_carts', ['user_id'])
    # One active cart per user
    op.create_index(
        'uq_store_carts_active_user',
        'store_carts',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text('is_active'),
        sqlite_where=sa.text('is_active = 1'),
    )

    op.create_table(
        'store_cart_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('cart_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(18, 2), nullable=False),
        sa.Column('added_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_store_cart_items'),
        sa.ForeignKeyConstraint(
            ['cart_id'], ['store_carts.id'], ondelete='CASCADE',
            name='fk_store_cart_items_cart_id_store_carts',
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['store_products.id'],
            name='fk_store_cart_items_product_id_store_products',
        ),
        sa.UniqueConstraint('cart_id', 'product_id', name='unique_cart_product'),
        sa.CheckConstraint('quantity > 0', name='ck_store_cart_items_positive_quantity'),
    )

    op.create_table(
        'store_coupons',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('code', sa.String(50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('discount_percentage', sa.Numeric(5, 2), nullable=False),
        sa.Column('max_discount_amount', sa.Numeric(18, 2), nullable=True),
        sa.Column('minimum_order_amount', sa.Numeric(18, 2), nullable=True),
        sa.Column('valid_from', sa.DateTime(timezone=True), nullable=False),
        sa.Column('valid_to', sa.DateTime(timezone=True), nullable=False),
        sa.Column('usage_limit', sa.Integer(), nullable=False),
        sa.Column('used_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_store_coupons'),
        sa.UniqueConstraint('code', name='uq_store_coupons_code'),
        sa.CheckConstraint(
            'discount_percentage > 0 AND discount_percentage <= 100',
            name='ck_store_coupons_discount_percentage_range',
        ),
        sa.CheckConstraint(
            'used_count <= usage_limit', name='ck_store_coupons_usage_within_limit'
        ),
    )

    op.create_table(
        'store_orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('order_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', order_status_enum, server_default='pending', nullable=False),
        sa.Column('sub_total', sa.Numeric(18, 2), nullable=False),
        sa.Column('discount_amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('coupon_code', sa.String(50), nullable=True),
        sa.Column('shipping_address', sa.Text(), nullable=True),
        sa.Column('is_paid', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_store_orders'),
        sa.ForeignKeyConstraint(
            ['user_id'], ['store_users.id'], name='fk_store_orders_user_id_store_users'
        ),
    )
    op.create_index('ix_store_orders_user_id', 'store_orders', ['user_id'])

    op.create_table(
        'store_order_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('product_title', sa.String(255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(18, 2), nullable=False),
        sa.Column('total_price', sa.Numeric(18, 2), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_store_order_items'),
        sa.ForeignKeyConstraint(
            ['order_id'], ['store_orders.id'], ondelete='CASCADE',
            name='fk_store_order_items_order_id_store_orders',
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['store_products.id'],
            name='fk_store_order_items_product_id_store_products',
        ),
    )

    op.create_table(
        'store_reviews',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('is_approved', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_store_reviews'),
        sa.ForeignKeyConstraint(
            ['user_id'], ['store_users.id'], name='fk_store_reviews_user_id_store_users'
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['store_products.id'],
            name='fk_store_reviews_product_id_store_products',
        ),
        sa.CheckConstraint(
            'rating >= 1 AND rating <= 5', name='ck_store_reviews_rating_range'
        ),
    )
    op.create_index('ix_store_reviews_user_id', 'store_reviews', ['user_id'])
    op.create_index('ix_store_reviews_product_id', 'store_reviews', ['product_id'])

    op.create_table(
        'store_wishlist_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('added_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_store_wishlist_items'),
        sa.ForeignKeyConstraint(
            ['user_id'], ['store_users.id'], ondelete='CASCADE',
            name='fk_store_wishlist_items_user_id_store_users',
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['store_products.id'], ondelete='CASCADE',
            name='fk_store_wishlist_items_product_id_store_products',
        ),
        sa.UniqueConstraint('user_id', 'product_id', name='unique_wishlist_product'),
    )


def downgrade() -> None:
    """Downgrade schema - Drop store tables."""
    op.drop_table('store_wishlist_items')
    op.drop_index('ix_store_reviews_product_id', table_name='store_reviews')
    op.drop_index('ix_store_reviews_user_id', table_name='store_reviews')
    op.drop_table('store_reviews')
    op.drop_table('store_order_items')
    op.drop_index('ix_store_orders_user_id', table_name='store_orders')
    op.drop_table('store_orders')
    op.drop_table('store_coupons')
    op.drop_table('store_cart_items')
    op.drop_index('uq_store_carts_active_user', table_name='store_carts')
    op.drop_index('ix_store_carts_user_id', table_name='store_carts')
    op.drop_table('store_carts')
    op.drop_index('ix_store_products_category_id', table_name='store_products')
    op.drop_table('store_products')
    op.drop_table('store_categories')
    op.drop_table('store_users')
    order_status_enum.drop(op.get_bind(), checkfirst=True)
    user_role_enum.drop(op.get_bind(), checkfirst=True)
