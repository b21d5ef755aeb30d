"""Create marketplace tables

Revision ID: 3f1c9a2b7d10
Revises: 
Create Date: 2026-10-18 09:12:44.512093

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Revision identifiers used by Alembic
revision: str = '3f1c9a2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ORDER_STATUSES = ('pending', 'confirmed', 'shipped', 'delivered', 'cancelled')
PAYMENT_STATUSES = ('pending', 'completed', 'failed')
DELIVERY_STATUSES = ('pending', 'picked_up', 'in_transit', 'delivered', 'failed')


def upgrade() -> None:
    """Upgrade schema."""
    # Accounts and role profiles
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'farmers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, unique=True),
        sa.Column('location', sa.String(), nullable=False),
        sa.Column('product', sa.String(), nullable=True),
    )
    op.create_table(
        'buyers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, unique=True),
        sa.Column('location', sa.String(), nullable=True),
    )

    # Catalog and cart
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('farmer_id', sa.Integer(), sa.ForeignKey('farmers.id'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('price', sa.Float(), sa.CheckConstraint('price > 0'), nullable=False),
        sa.Column('quantity_available', sa.Integer(), sa.CheckConstraint('quantity_available >= 0'), nullable=False),
        sa.Column('unit', sa.String(), nullable=False),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_products_farmer_id', 'products', ['farmer_id'])
    op.create_index('ix_products_name', 'products', ['name'])
    op.create_index('ix_products_category', 'products', ['category'])
    op.create_index('ix_products_is_active', 'products', ['is_active'])

    op.create_table(
        'cart_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('buyer_id', sa.Integer(), sa.ForeignKey('buyers.id'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), sa.CheckConstraint('quantity > 0'), nullable=False),
        sa.Column('added_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('buyer_id', 'product_id', name='uq_cartitem_buyer_product'),
    )
    op.create_index('ix_cart_items_buyer_id', 'cart_items', ['buyer_id'])
    op.create_index('ix_cart_items_product_id', 'cart_items', ['product_id'])

    # Orders, payments and deliveries
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('buyer_id', sa.Integer(), sa.ForeignKey('buyers.id'), nullable=False),
        sa.Column('farmer_id', sa.Integer(), sa.ForeignKey('farmers.id'), nullable=False),
        sa.Column('total_amount', sa.Float(), nullable=False),
        sa.Column('status', sa.Enum(*ORDER_STATUSES, name='orderstatus', native_enum=False, length=20),
                  nullable=False),
        sa.Column('delivery_address', sa.String(), nullable=False),
        sa.Column('delivery_city', sa.String(), nullable=False),
        sa.Column('delivery_phone', sa.String(), nullable=False),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('order_date', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_orders_buyer_id', 'orders', ['buyer_id'])
    op.create_index('ix_orders_farmer_id', 'orders', ['farmer_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_order_date', 'orders', ['order_date'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Float(), nullable=False),
        sa.Column('total_price', sa.Float(), nullable=False),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('payment_method', sa.String(), nullable=False),
        sa.Column('transaction_id', sa.String(), nullable=False),
        sa.Column('payment_status', sa.Enum(*PAYMENT_STATUSES, name='paymentstatus', native_enum=False, length=20),
                  nullable=False),
        sa.Column('processed_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('payment_date', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_payments_order_id', 'payments', ['order_id'])
    op.create_index('ix_payments_payment_status', 'payments', ['payment_status'])
    op.create_index('ix_payments_payment_date', 'payments', ['payment_date'])

    op.create_table(
        'logistics',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('delivery_agent_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('pickup_location', sa.String(), nullable=True),
        sa.Column('dropoff_location', sa.String(), nullable=True),
        sa.Column('delivery_status', sa.Enum(*DELIVERY_STATUSES, name='deliverystatus', native_enum=False, length=20),
                  nullable=False),
        sa.Column('delivery_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('estimated_delivery', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_delivery', sa.DateTime(timezone=True), nullable=True),
        sa.Column('tracking_number', sa.String(), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_logistics_order_id', 'logistics', ['order_id'])
    op.create_index('ix_logistics_delivery_agent_id', 'logistics', ['delivery_agent_id'])
    op.create_index('ix_logistics_created_at', 'logistics', ['created_at'])

    # Audit trail
    op.create_table(
        'logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('ts', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', sa.String(50)),
        sa.Column('resource', sa.String(50)),
        sa.Column('resource_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(20)),
        sa.Column('ip', sa.String(64), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
    )
    for column in ('ts', 'user_id', 'action', 'resource', 'resource_id', 'status'):
        op.create_index(f'ix_logs_{column}', 'logs', [column])


def downgrade() -> None:
    """Downgrade schema."""
    # Children before parents
    for table in ('logs', 'logistics', 'payments', 'order_items', 'orders',
                  'cart_items', 'products', 'buyers', 'farmers', 'users'):
        op.drop_table(table)
