"""Initial schema - stock items, ledger, orders and issuances

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


stock_kind = sa.Enum('glass', 'medicine', name='stock_kind')
ledger_entry_type = sa.Enum('issued', 'restocked', 'returned', 'adjusted', name='ledger_entry_type')
issuance_status = sa.Enum('issued', 'returned', 'damaged', name='issuance_status')
order_type = sa.Enum('retail', 'wholesale', 'contract', name='order_type')
order_status = sa.Enum(
    'pending', 'processing', 'completed', 'delivered', 'installed', 'cancelled',
    name='order_status'
)
payment_method = sa.Enum('cash', 'card', 'credit', name='payment_method')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # Create stock_items table
    op.create_table(
        'stock_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('kind', stock_kind, nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('batch_number', sa.String(length=100), nullable=False),
        sa.Column('supplier', sa.String(length=255), nullable=False),
        sa.Column('warehouse_location', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('current_quantity', sa.Integer(), nullable=False),
        sa.Column('original_quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.DECIMAL(precision=10, scale=2), nullable=False),
        sa.Column('selling_price', sa.DECIMAL(precision=10, scale=2), nullable=True),
        sa.Column('thickness_mm', sa.Float(), nullable=True),
        sa.Column('width_cm', sa.Float(), nullable=True),
        sa.Column('height_cm', sa.Float(), nullable=True),
        sa.Column('color', sa.String(length=50), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('manufacturing_date', sa.Date(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('current_quantity >= 0', name='ck_stock_items_current_quantity_non_negative'),
        sa.CheckConstraint('original_quantity >= 0', name='ck_stock_items_original_quantity_non_negative'),
        sa.CheckConstraint('current_quantity <= original_quantity', name='ck_stock_items_current_within_original'),
        sa.CheckConstraint('unit_price >= 0', name='ck_stock_items_unit_price_non_negative'),
        sa.PrimaryKeyConstraint('id', name='pk_stock_items'),
        sa.UniqueConstraint('batch_number', name='uq_stock_items_batch_number')
    )
    op.create_index('ix_stock_items_kind', 'stock_items', ['kind'])
    op.create_index('idx_stock_items_fifo', 'stock_items', ['created_at', 'current_quantity'])
    op.create_index('idx_stock_items_category', 'stock_items', ['kind', 'category'])

    # Create orders table
    op.create_table(
        'orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('invoice_number', sa.String(length=32), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_phone', sa.String(length=50), nullable=False),
        sa.Column('customer_address', sa.Text(), nullable=True),
        sa.Column('order_type', order_type, nullable=False),
        sa.Column('status', order_status, nullable=False),
        sa.Column('total_amount', sa.DECIMAL(precision=12, scale=2), nullable=False),
        sa.Column('amount_paid', sa.DECIMAL(precision=12, scale=2), nullable=False),
        sa.Column('balance_due', sa.DECIMAL(precision=12, scale=2), nullable=False),
        sa.Column('payment_method', payment_method, nullable=False),
        sa.Column('delivery_required', sa.Boolean(), nullable=False),
        sa.Column('delivery_address', sa.Text(), nullable=True),
        sa.Column('installation_required', sa.Boolean(), nullable=False),
        sa.Column('issued_by', sa.String(length=100), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_orders'),
        sa.UniqueConstraint('invoice_number', name='uq_orders_invoice_number')
    )
    op.create_index('ix_orders_customer_phone', 'orders', ['customer_phone'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    # Create order_lines table
    op.create_table(
        'order_lines',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('stock_item_id', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.DECIMAL(precision=10, scale=2), nullable=False),
        sa.Column('discount', sa.DECIMAL(precision=5, scale=2), nullable=False),
        sa.Column('cut_to_size', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('quantity > 0', name='ck_order_lines_quantity_positive'),
        sa.CheckConstraint('discount >= 0 AND discount <= 100', name='ck_order_lines_discount_percent'),
        sa.ForeignKeyConstraint(
            ['order_id'], ['orders.id'],
            name='fk_order_lines_order_id_orders', ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['stock_item_id'], ['stock_items.id'],
            name='fk_order_lines_stock_item_id_stock_items', ondelete='RESTRICT'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_order_lines')
    )
    op.create_index('ix_order_lines_order_id', 'order_lines', ['order_id'])
    op.create_index('idx_order_lines_stock_item', 'order_lines', ['stock_item_id'])

    # Create issuances table
    op.create_table(
        'issuances',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('issuance_number', sa.String(length=32), nullable=False),
        sa.Column('stock_item_id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=True),
        sa.Column('order_number', sa.String(length=32), nullable=True),
        sa.Column('prescription_id', sa.String(length=100), nullable=True),
        sa.Column('issued_to', sa.String(length=255), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('issued_by', sa.String(length=100), nullable=False),
        sa.Column('returned_by', sa.String(length=100), nullable=True),
        sa.Column('status', issuance_status, nullable=False),
        sa.Column('issued_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('returned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('quantity > 0', name='ck_issuances_quantity_positive'),
        sa.ForeignKeyConstraint(
            ['stock_item_id'], ['stock_items.id'],
            name='fk_issuances_stock_item_id_stock_items', ondelete='RESTRICT'
        ),
        sa.ForeignKeyConstraint(
            ['order_id'], ['orders.id'],
            name='fk_issuances_order_id_orders', ondelete='RESTRICT'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_issuances'),
        sa.UniqueConstraint('issuance_number', name='uq_issuances_issuance_number')
    )
    op.create_index('ix_issuances_stock_item_id', 'issuances', ['stock_item_id'])
    op.create_index('ix_issuances_order_id', 'issuances', ['order_id'])
    op.create_index('ix_issuances_status', 'issuances', ['status'])
    op.create_index('idx_issuances_issued_at', 'issuances', ['issued_at'])
    op.create_index('idx_issuances_item_status', 'issuances', ['stock_item_id', 'status'])
    op.create_index('idx_issuances_order_status', 'issuances', ['order_id', 'status'])

    # Create stock_ledger_entries table
    op.create_table(
        'stock_ledger_entries',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('stock_item_id', sa.Uuid(), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column('entry_type', ledger_entry_type, nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('previous_quantity', sa.Integer(), nullable=False),
        sa.Column('new_quantity', sa.Integer(), nullable=False),
        sa.Column('changed_by', sa.String(length=100), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('prescription_id', sa.String(length=100), nullable=True),
        sa.Column('order_id', sa.Uuid(), nullable=True),
        sa.Column('issuance_id', sa.Uuid(), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('quantity >= 0', name='ck_stock_ledger_entries_quantity_non_negative'),
        sa.CheckConstraint('sequence > 0', name='ck_stock_ledger_entries_sequence_positive'),
        sa.UniqueConstraint('stock_item_id', 'sequence', name='uq_stock_ledger_entries_stock_item_id'),
        sa.ForeignKeyConstraint(
            ['stock_item_id'], ['stock_items.id'],
            name='fk_stock_ledger_entries_stock_item_id_stock_items', ondelete='RESTRICT'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_stock_ledger_entries')
    )
    op.create_index('ix_stock_ledger_entries_stock_item_id', 'stock_ledger_entries', ['stock_item_id'])
    op.create_index('idx_ledger_item_occurred', 'stock_ledger_entries', ['stock_item_id', 'occurred_at'])
    op.create_index('idx_ledger_entry_type', 'stock_ledger_entries', ['entry_type'])


def downgrade() -> None:
    op.drop_table('stock_ledger_entries')
    op.drop_table('issuances')
    op.drop_table('order_lines')
    op.drop_table('orders')
    op.drop_table('stock_items')

    bind = op.get_bind()
    for enum_type in (payment_method, order_status, order_type, issuance_status, ledger_entry_type, stock_kind):
        enum_type.drop(bind, checkfirst=True)
