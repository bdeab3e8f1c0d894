"""Create slot_pools and slot_requests tables

Revision ID: a001_create_slot_tables
Revises:
Create Date: 2026-10-17

This migration creates tables for featured slot scheduling:
- slot_pools: one lock/version row per tier
- slot_requests: promotional bookings and their last admitted window
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'a001_create_slot_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create slot_pools table
    op.create_table(
        'slot_pools',
        sa.Column('tier', sa.String(20), primary_key=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('last_replanned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )

    # Create slot_requests table
    op.create_table(
        'slot_requests',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('tier', sa.String(20), nullable=False),
        sa.Column('resource_key', sa.String(), nullable=False),  # No FK - catalog lives in another service

        # Requested booking
        sa.Column('requested_start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration_hours', sa.Integer(), nullable=False, server_default='48'),

        # Lifecycle
        sa.Column('status', sa.String(20), nullable=False, server_default='scheduled'),

        # Admission
        sa.Column('effective_start_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('effective_end_at', sa.DateTime(timezone=True), nullable=True),

        sa.Column('created_by', sa.String(64), nullable=False, server_default='admin-panel'),

        # Timestamps
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )

    # Add check constraints
    op.create_check_constraint(
        'check_slot_duration_hours',
        'slot_requests',
        "duration_hours BETWEEN 1 AND 168"
    )

    op.create_check_constraint(
        'check_slot_status',
        'slot_requests',
        "status IN ('scheduled', 'completed', 'cancelled')"
    )

    op.create_check_constraint(
        'check_slot_tier',
        'slot_requests',
        "tier IN ('spotlight', 'promoted')"
    )

    # Create indexes
    op.create_index('ix_slot_requests_tier', 'slot_requests', ['tier'])
    op.create_index('ix_slot_requests_resource_key', 'slot_requests', ['resource_key'])
    op.create_index('idx_slot_requests_tier_status', 'slot_requests', ['tier', 'status'])
    op.create_index(
        'idx_slot_requests_requested',
        'slot_requests',
        ['tier', 'requested_start_at', 'created_at']
    )

    # Seed one lock row per tier
    op.execute("INSERT INTO slot_pools (tier) VALUES ('spotlight'), ('promoted')")


def downgrade() -> None:
    op.drop_index('idx_slot_requests_requested', table_name='slot_requests')
    op.drop_index('idx_slot_requests_tier_status', table_name='slot_requests')
    op.drop_index('ix_slot_requests_resource_key', table_name='slot_requests')
    op.drop_index('ix_slot_requests_tier', table_name='slot_requests')
    op.drop_table('slot_requests')
    op.drop_table('slot_pools')
