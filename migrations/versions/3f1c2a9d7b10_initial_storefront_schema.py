"""initial storefront schema

Revision ID: 3f1c2a9d7b10
Revises: 
Create Date: 2026-10-19 10:12:41.503218

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

order_status = sa.Enum('PENDING', 'PAID', 'DELIVERED', 'CANCELLED', name='orderstatus')
sender_role = sa.Enum('ADMIN', 'CUSTOMER', name='senderrole')
movement_type = sa.Enum('IN', 'OUT', name='movementtype')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'products',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('sale_price', sa.Integer(), nullable=False),
        sa.Column('unit_cost', sa.Integer(), nullable=False),
        sa.Column('photos', sa.JSON(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_products_active', 'products', ['active'])
    op.create_index('ix_products_created_at', 'products', ['created_at'])

    op.create_table(
        'orders',
        sa.Column('id', sa.String(length=128), primary_key=True),
        sa.Column('status', order_status, nullable=False),
        sa.Column('customer_name', sa.String(length=128), nullable=False),
        sa.Column('customer_phone', sa.String(length=32), nullable=False),
        sa.Column('customer_phone_norm', sa.String(length=15), nullable=False),
        sa.Column('customer_phone_hash', sa.String(length=64), nullable=True),
        sa.Column('federated_uid', sa.String(length=128), nullable=True),
        sa.Column('federated_email', sa.String(length=320), nullable=True),
        sa.Column('pin_hash', sa.Text(), nullable=True),
        sa.Column('revenue', sa.Integer(), nullable=False),
        sa.Column('cost', sa.Integer(), nullable=False),
        sa.Column('profit', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('delivered_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_customer_phone_norm', 'orders', ['customer_phone_norm'])
    op.create_index('ix_orders_federated_uid', 'orders', ['federated_uid'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('order_id', sa.String(length=128), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.String(length=64), nullable=False),
        sa.Column('name_snapshot', sa.String(length=255), nullable=False),
        sa.Column('qty', sa.Integer(), nullable=False),
        sa.Column('unit_price_snapshot', sa.Integer(), nullable=False),
        sa.Column('unit_cost_snapshot', sa.Integer(), nullable=False),
        sa.Column('custom_text', sa.Text(), nullable=False),
        sa.Column('attributes', sa.JSON(), nullable=True),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    op.create_table(
        'chat_messages',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('public_id', sa.String(length=64), nullable=False, unique=True),
        sa.Column('order_id', sa.String(length=128), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender_role', sender_role, nullable=False),
        sa.Column('sender_id', sa.String(length=128), nullable=True),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('image_url', sa.String(length=1024), nullable=True),
        sa.Column('image_path', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_chat_messages_order_created', 'chat_messages', ['order_id', 'created_at', 'id'])

    op.create_table(
        'cash_movements',
        sa.Column('id', sa.String(length=160), primary_key=True),
        sa.Column('type', movement_type, nullable=False),
        sa.Column('category', sa.String(length=32), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('note', sa.Text(), nullable=False),
        sa.Column('items_summary', sa.Text(), nullable=True),
        sa.Column('order_id', sa.String(length=128), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_cash_movements_order_id', 'cash_movements', ['order_id'])
    op.create_index('ix_cash_movements_occurred_at', 'cash_movements', ['occurred_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('cash_movements')
    op.drop_table('chat_messages')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('products')
    movement_type.drop(op.get_bind(), checkfirst=True)
    sender_role.drop(op.get_bind(), checkfirst=True)
    order_status.drop(op.get_bind(), checkfirst=True)
