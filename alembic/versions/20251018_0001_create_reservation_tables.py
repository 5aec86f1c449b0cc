"""Create reservation tables

Revision ID: create_reservation_tables
Revises:
Create Date: 2025-10-18 00:01:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'create_reservation_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('dining_tables',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('table_number', sa.String(length=20), nullable=False),
        sa.Column('section', sa.String(length=50), server_default='main'),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.CheckConstraint('capacity >= 1', name='ck_dining_table_capacity'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('table_number')
    )
    op.create_index('ix_dining_tables_id', 'dining_tables', ['id'])

    op.create_table('opening_hours',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('open_time', sa.Time(), nullable=False),
        sa.Column('close_time', sa.Time(), nullable=False),
        sa.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_opening_hours_day'),
        sa.CheckConstraint('close_time > open_time', name='ck_opening_hours_range'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('day_of_week')
    )

    op.create_table('holidays',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('name', sa.String(length=100)),
        sa.Column('is_closed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('open_time', sa.Time()),
        sa.Column('close_time', sa.Time()),
        sa.Column('requires_deposit', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('notes', sa.Text()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_holidays_date', 'holidays', ['date'], unique=True)

    reservation_status = sa.Enum('PENDING', 'CONFIRMED', 'CANCELLED', name='reservationstatus')

    op.create_table('reservations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('table_id', sa.Integer(), nullable=True),
        sa.Column('reservation_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default='90'),
        sa.Column('party_size', sa.Integer(), nullable=False),
        sa.Column('status', reservation_status, nullable=False),
        sa.Column('confirmation_code', sa.String(length=20)),
        sa.Column('source', sa.String(length=50), server_default='website'),
        sa.Column('contact_name', sa.String(length=100), nullable=False),
        sa.Column('contact_email', sa.String(length=255)),
        sa.Column('contact_phone', sa.String(length=30)),
        sa.Column('special_requests', sa.Text()),
        sa.Column('deposit_required', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('payment_reference', sa.String(length=100)),
        sa.Column('cancelled_at', sa.DateTime(timezone=True)),
        sa.Column('cancellation_reason', sa.Text()),
        sa.Column('cancelled_by', sa.String(length=20)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.Column('confirmed_at', sa.DateTime(timezone=True)),
        sa.CheckConstraint('party_size >= 1', name='ck_reservation_party_size'),
        sa.CheckConstraint('duration_minutes > 0', name='ck_reservation_duration'),
        sa.ForeignKeyConstraint(['table_id'], ['dining_tables.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reservations_id', 'reservations', ['id'])
    op.create_index('ix_reservations_user_id', 'reservations', ['user_id'])
    op.create_index('ix_reservations_reservation_date', 'reservations', ['reservation_date'])
    op.create_index('ix_reservations_status', 'reservations', ['status'])
    op.create_index('ix_reservations_confirmation_code', 'reservations', ['confirmation_code'], unique=True)
    op.create_index('idx_reservation_date_table', 'reservations', ['reservation_date', 'table_id'])
    op.create_index('idx_reservation_status_date', 'reservations', ['status', 'reservation_date'])

    # One row per (table, slot) held by a confirmed reservation
    op.create_table('reservation_slot_claims',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reservation_id', sa.Integer(), nullable=False),
        sa.Column('table_id', sa.Integer(), nullable=False),
        sa.Column('claim_date', sa.Date(), nullable=False),
        sa.Column('slot_start', sa.Time(), nullable=False),
        sa.ForeignKeyConstraint(['reservation_id'], ['reservations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['table_id'], ['dining_tables.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('table_id', 'claim_date', 'slot_start', name='uq_slot_claim_table_slot')
    )
    op.create_index(
        'ix_reservation_slot_claims_reservation_id', 'reservation_slot_claims', ['reservation_id']
    )

    op.create_table('reservation_audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reservation_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('user_id', sa.Integer()),
        sa.Column('user_type', sa.String(length=20)),
        sa.Column('field_changes', sa.JSON()),
        sa.Column('reason', sa.Text()),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('details', sa.JSON()),
        sa.ForeignKeyConstraint(['reservation_id'], ['reservations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reservation_audit_logs_id', 'reservation_audit_logs', ['id'])
    op.create_index('idx_reservation_audit_reservation_id', 'reservation_audit_logs', ['reservation_id'])
    op.create_index('idx_reservation_audit_action', 'reservation_audit_logs', ['action'])


def downgrade():
    op.drop_table('reservation_audit_logs')
    op.drop_table('reservation_slot_claims')
    op.drop_table('reservations')
    op.drop_table('holidays')
    op.drop_table('opening_hours')
    op.drop_table('dining_tables')
    sa.Enum(name='reservationstatus').drop(op.get_bind(), checkfirst=True)
