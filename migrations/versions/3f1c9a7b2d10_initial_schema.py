"""initial_schema

Revision ID: 3f1c9a7b2d10
Revises:
Create Date: 2026-10-19 10:12:44.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7b2d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_role = sa.Enum('ADMIN', 'STAFF', 'TECHNICIAN', name='user_role')
product_status = sa.Enum('ACTIVE', 'COMING_SOON', 'DISCONTINUED', name='product_status')
order_status = sa.Enum('PENDING', 'FULFILLED', 'CANCELLED', name='order_status')
service_type = sa.Enum('MANUAL', 'QUARTERLY', name='service_type')
service_status = sa.Enum('AVAILABLE', 'ASSIGNED', 'IN_PROGRESS', 'COMPLETED', name='service_status')
invoice_type = sa.Enum('ORDER', 'SERVICE', name='invoice_type')
invoice_status = sa.Enum('PENDING', 'SENT', 'PAID', 'CANCELLED', name='invoice_status')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'customers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('custom_id', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_customers_custom_id', 'customers', ['custom_id'], unique=True)
    op.create_index('ix_customers_name', 'customers', ['name'])

    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('custom_id', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('model', sa.String(length=255), nullable=False),
        sa.Column('description', sa.String(length=2000), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', product_status, nullable=False),
        *_timestamps(),
        sa.CheckConstraint('price > 0', name='product_price_positive'),
    )
    op.create_index('ix_products_custom_id', 'products', ['custom_id'], unique=True)
    op.create_index('ix_products_status', 'products', ['status'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('custom_id', sa.String(length=20), nullable=False),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('customer_custom_id', sa.String(length=20), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('product_custom_id', sa.String(length=20), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', order_status, nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('invoice_id', sa.Uuid(), nullable=True),
        sa.Column('invoice_number', sa.String(length=20), nullable=True),
        sa.Column('invoice_status', sa.String(length=20), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('quantity >= 1', name='order_quantity_positive'),
        sa.CheckConstraint('unit_price > 0', name='order_unit_price_positive'),
    )
    op.create_index('ix_orders_custom_id', 'orders', ['custom_id'], unique=True)
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])
    op.create_index('ix_orders_product_id', 'orders', ['product_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_created_by', 'orders', ['created_by'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])

    op.create_table(
        'services',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('custom_id', sa.String(length=20), nullable=False),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('customer_custom_id', sa.String(length=20), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('product_custom_id', sa.String(length=20), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.id', ondelete='SET NULL'), nullable=True),
        sa.Column('order_custom_id', sa.String(length=20), nullable=True),
        sa.Column('technician_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('technician_name', sa.String(length=255), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('assigned_by', sa.Uuid(), nullable=True),
        sa.Column('service_type', service_type, nullable=False),
        sa.Column('status', service_status, nullable=False),
        sa.Column('scheduled_date', sa.Date(), nullable=False),
        sa.Column('completed_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.String(length=2000), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_services_custom_id', 'services', ['custom_id'], unique=True)
    op.create_index('ix_services_customer_id', 'services', ['customer_id'])
    op.create_index('ix_services_product_id', 'services', ['product_id'])
    op.create_index('ix_services_technician_id', 'services', ['technician_id'])
    op.create_index('ix_services_created_by', 'services', ['created_by'])
    op.create_index('ix_services_assigned_by', 'services', ['assigned_by'])
    op.create_index('ix_services_status', 'services', ['status'])
    op.create_index('ix_services_scheduled_date', 'services', ['scheduled_date'])
    op.create_index('ix_services_created_at', 'services', ['created_at'])

    op.create_table(
        'invoices',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('custom_id', sa.String(length=20), nullable=False),
        sa.Column('number', sa.String(length=20), nullable=False),
        sa.Column('invoice_type', invoice_type, nullable=False),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=True),
        sa.Column('order_custom_id', sa.String(length=20), nullable=True),
        sa.Column('service_id', sa.Uuid(), sa.ForeignKey('services.id', ondelete='CASCADE'), nullable=True),
        sa.Column('service_custom_id', sa.String(length=20), nullable=True),
        sa.Column('customer_id', sa.Uuid(), nullable=False),
        sa.Column('customer_custom_id', sa.String(length=20), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('product_custom_id', sa.String(length=20), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', invoice_status, nullable=False),
        sa.Column('share_url', sa.String(length=4000), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            '(order_id IS NOT NULL AND service_id IS NULL) OR '
            '(order_id IS NULL AND service_id IS NOT NULL)',
            name='invoice_single_source',
        ),
        sa.CheckConstraint('total_amount > 0', name='invoice_amount_positive'),
        sa.UniqueConstraint('service_id', name='uq_invoices_service_id'),
    )
    op.create_index('ix_invoices_custom_id', 'invoices', ['custom_id'], unique=True)
    op.create_index('ix_invoices_order_id', 'invoices', ['order_id'])
    op.create_index('ix_invoices_customer_id', 'invoices', ['customer_id'])
    op.create_index('ix_invoices_status', 'invoices', ['status'])
    op.create_index('ix_invoices_created_at', 'invoices', ['created_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('invoices')
    op.drop_table('services')
    op.drop_table('orders')
    op.drop_table('products')
    op.drop_table('customers')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (
        invoice_status,
        invoice_type,
        service_status,
        service_type,
        order_status,
        product_status,
        user_role,
    ):
        enum_type.drop(bind, checkfirst=True)
