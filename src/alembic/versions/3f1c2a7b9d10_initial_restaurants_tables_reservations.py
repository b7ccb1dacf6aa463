"""initial restaurants, tables and reservations

Revision ID: 3f1c2a7b9d10
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1c2a7b9d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RESERVATION_STATUS = sa.Enum(
    'pending',
    'confirmed',
    'completed',
    'cancelled',
    name='reservation_status',
)


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column(
            'is_active',
            sa.Boolean(),
            server_default=sa.text('true'),
            nullable=False,
        ),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'restaurant',
        *_base_columns(),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('opening_time', sa.String(length=5), nullable=False),
        sa.Column('closing_time', sa.String(length=5), nullable=False),
        sa.Column('total_tables', sa.Integer(), nullable=False),
        sa.CheckConstraint(
            'opening_time < closing_time',
            name='ck_restaurant_hours',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_restaurant_name'),
        'restaurant',
        ['name'],
        unique=False,
    )

    op.create_table(
        'table',
        *_base_columns(),
        sa.Column('restaurant_id', sa.UUID(), nullable=False),
        sa.Column('table_number', sa.Integer(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.CheckConstraint('capacity > 0', name='ck_table_capacity'),
        sa.ForeignKeyConstraint(
            ['restaurant_id'],
            ['restaurant.id'],
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'restaurant_id',
            'table_number',
            name='uq_table_number_per_restaurant',
        ),
    )
    op.create_index(
        op.f('ix_table_restaurant_id'),
        'table',
        ['restaurant_id'],
        unique=False,
    )

    op.create_table(
        'reservation',
        *_base_columns(),
        sa.Column('restaurant_id', sa.UUID(), nullable=False),
        sa.Column('table_id', sa.UUID(), nullable=False),
        sa.Column('customer_name', sa.String(length=128), nullable=False),
        sa.Column('customer_phone', sa.String(length=32), nullable=False),
        sa.Column('customer_email', sa.String(length=254), nullable=True),
        sa.Column('party_size', sa.Integer(), nullable=False),
        sa.Column('reservation_date', sa.Date(), nullable=False),
        sa.Column('reservation_time', sa.String(length=5), nullable=False),
        sa.Column('duration_hours', sa.Float(), nullable=False),
        sa.Column('status', RESERVATION_STATUS, nullable=False),
        sa.CheckConstraint(
            'party_size > 0',
            name='ck_reservation_party_size',
        ),
        sa.CheckConstraint(
            'duration_hours > 0',
            name='ck_reservation_duration',
        ),
        sa.ForeignKeyConstraint(
            ['restaurant_id'],
            ['restaurant.id'],
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['table_id'],
            ['table.id'],
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_reservation_lookup',
        'reservation',
        ['restaurant_id', 'table_id', 'reservation_date', 'status'],
        unique=False,
    )
    op.create_index(
        'ix_reservation_date',
        'reservation',
        ['restaurant_id', 'reservation_date'],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_reservation_date', table_name='reservation')
    op.drop_index('ix_reservation_lookup', table_name='reservation')
    op.drop_table('reservation')
    op.drop_index(op.f('ix_table_restaurant_id'), table_name='table')
    op.drop_table('table')
    op.drop_index(op.f('ix_restaurant_name'), table_name='restaurant')
    op.drop_table('restaurant')
    RESERVATION_STATUS.drop(op.get_bind(), checkfirst=True)
