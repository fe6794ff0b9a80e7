"""Create products table.

Revision ID: 001_create_products
Revises:
Create Date: 2026-10-18

Products with a unique SKU index; is_available mirrors stock_quantity > 0.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001_create_products'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'products',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('brand', sa.String(100), nullable=False),
        sa.Column('sku', sa.String(64), nullable=False),
        sa.Column('category', sa.String(20), nullable=False),
        sa.Column('price', sa.Numeric(18, 2), nullable=False),
        sa.Column('release_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('stock_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_products_sku', 'products', ['sku'], unique=True)
    op.create_index('ix_products_created_at', 'products', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_products_created_at', table_name='products')
    op.drop_index('ix_products_sku', table_name='products')
    op.drop_table('products')
