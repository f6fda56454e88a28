"""Initial rental booking schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create properties table
    op.create_table('properties',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('max_guests', sa.Integer(), nullable=True),
        sa.Column('nightly_rate_amount', sa.Integer(), nullable=False),
        sa.Column('nightly_rate_currency', sa.String(length=3), nullable=False),
        sa.Column('min_stay_nights', sa.Integer(), nullable=True),
        sa.Column('max_stay_nights', sa.Integer(), nullable=True),
        sa.Column('lead_time_days', sa.Integer(), nullable=True),
        sa.Column('buffer_days', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('length(title) > 0', name='ck_property_title_not_empty'),
        sa.CheckConstraint('nightly_rate_amount >= 0', name='ck_property_nightly_rate_non_negative'),
        sa.CheckConstraint('length(nightly_rate_currency) = 3', name='ck_property_currency_length'),
        sa.CheckConstraint('max_guests IS NULL OR max_guests > 0', name='ck_property_max_guests_positive'),
        sa.CheckConstraint('min_stay_nights IS NULL OR min_stay_nights >= 0', name='ck_property_min_stay_non_negative'),
        sa.CheckConstraint('max_stay_nights IS NULL OR max_stay_nights > 0', name='ck_property_max_stay_positive'),
        sa.CheckConstraint(
            'min_stay_nights IS NULL OR max_stay_nights IS NULL OR min_stay_nights <= max_stay_nights',
            name='ck_property_stay_bounds_ordered'
        ),
        sa.CheckConstraint('lead_time_days IS NULL OR lead_time_days >= 0', name='ck_property_lead_time_non_negative'),
        sa.CheckConstraint('buffer_days IS NULL OR buffer_days >= 0', name='ck_property_buffer_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_properties_title'), 'properties', ['title'], unique=False)

    # Create blocked_dates table
    op.create_table('blocked_dates',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('property_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('blocked_on', sa.Date(), nullable=False),
        sa.Column('reason', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('property_id', 'blocked_on', name='uq_blocked_date_property_day')
    )
    op.create_index(op.f('ix_blocked_dates_property_id'), 'blocked_dates', ['property_id'], unique=False)
    op.create_index(op.f('ix_blocked_dates_blocked_on'), 'blocked_dates', ['blocked_on'], unique=False)

    # Create calendar_integrations table
    op.create_table('calendar_integrations',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('property_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('provider', sa.String(length=64), nullable=False),
        sa.Column('feed_url', sa.String(length=2048), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('last_synced_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('length(provider) > 0', name='ck_calendar_provider_not_empty'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_calendar_integrations_property_id'), 'calendar_integrations', ['property_id'], unique=False)
    op.create_index(op.f('ix_calendar_integrations_is_active'), 'calendar_integrations', ['is_active'], unique=False)
    op.create_index(op.f('ix_calendar_integrations_is_deleted'), 'calendar_integrations', ['is_deleted'], unique=False)

    # Create bookings table
    op.create_table('bookings',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('property_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('requester_id', sa.String(length=128), nullable=False),
        sa.Column('check_in', sa.Date(), nullable=False),
        sa.Column('check_out', sa.Date(), nullable=False),
        sa.Column('guest_count', sa.Integer(), nullable=False),
        sa.Column('total_price_amount', sa.Integer(), nullable=False),
        sa.Column('total_price_currency', sa.String(length=3), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('check_in < check_out', name='ck_booking_check_in_before_check_out'),
        sa.CheckConstraint('guest_count > 0', name='ck_booking_guest_count_positive'),
        sa.CheckConstraint('total_price_amount >= 0', name='ck_booking_total_price_non_negative'),
        sa.CheckConstraint('length(requester_id) > 0', name='ck_booking_requester_not_empty'),
        sa.CheckConstraint(
            "status IN ('PENDING_CONFIRMATION', 'CONFIRMED', 'CANCELLED', 'COMPLETED')",
            name='ck_booking_status_known'
        ),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bookings_property_id'), 'bookings', ['property_id'], unique=False)
    op.create_index(op.f('ix_bookings_requester_id'), 'bookings', ['requester_id'], unique=False)
    op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'], unique=False)
    op.create_index('ix_bookings_property_stay', 'bookings', ['property_id', 'check_in', 'check_out'], unique=False)

    # No two active bookings may share a night
    op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')
    op.execute(
        """
        ALTER TABLE bookings ADD CONSTRAINT ex_bookings_no_overlap
        EXCLUDE USING gist (property_id WITH =, daterange(check_in, check_out, '[)') WITH &&)
        WHERE (status IN ('PENDING_CONFIRMATION', 'CONFIRMED'))
        """
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.execute('ALTER TABLE bookings DROP CONSTRAINT IF EXISTS ex_bookings_no_overlap')
    op.drop_index('ix_bookings_property_stay', table_name='bookings')
    op.drop_index(op.f('ix_bookings_status'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_requester_id'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_property_id'), table_name='bookings')
    op.drop_table('bookings')

    op.drop_index(op.f('ix_calendar_integrations_is_deleted'), table_name='calendar_integrations')
    op.drop_index(op.f('ix_calendar_integrations_is_active'), table_name='calendar_integrations')
    op.drop_index(op.f('ix_calendar_integrations_property_id'), table_name='calendar_integrations')
    op.drop_table('calendar_integrations')

    op.drop_index(op.f('ix_blocked_dates_blocked_on'), table_name='blocked_dates')
    op.drop_index(op.f('ix_blocked_dates_property_id'), table_name='blocked_dates')
    op.drop_table('blocked_dates')

    op.drop_index(op.f('ix_properties_title'), table_name='properties')
    op.drop_table('properties')
