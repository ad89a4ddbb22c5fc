"""Create user_profiles, safety_contacts and scheduled_calls tables

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

call_status = sa.Enum('pending', 'completed', 'cancelled', name='call_status')

def upgrade() -> None:
    op.create_table('user_profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('safe_word', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_user_profiles_id', 'user_profiles', ['id'])
    op.create_index('ix_user_profiles_user_id', 'user_profiles', ['user_id'], unique=True)

    op.create_table('safety_contacts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('relationship', sa.String(length=100), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_safety_contacts_id', 'safety_contacts', ['id'])
    op.create_index('ix_safety_contacts_user_id', 'safety_contacts', ['user_id'])

    op.create_table('scheduled_calls',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('scheduled_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', call_status, nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_scheduled_calls_id', 'scheduled_calls', ['id'])
    op.create_index('ix_scheduled_calls_user_id', 'scheduled_calls', ['user_id'])
    op.create_index('ix_scheduled_calls_scheduled_time', 'scheduled_calls', ['scheduled_time'])

def downgrade() -> None:
    op.drop_index('ix_scheduled_calls_scheduled_time', table_name='scheduled_calls')
    op.drop_index('ix_scheduled_calls_user_id', table_name='scheduled_calls')
    op.drop_index('ix_scheduled_calls_id', table_name='scheduled_calls')
    op.drop_table('scheduled_calls')
    call_status.drop(op.get_bind(), checkfirst=True)

    op.drop_index('ix_safety_contacts_user_id', table_name='safety_contacts')
    op.drop_index('ix_safety_contacts_id', table_name='safety_contacts')
    op.drop_table('safety_contacts')

    op.drop_index('ix_user_profiles_user_id', table_name='user_profiles')
    op.drop_index('ix_user_profiles_id', table_name='user_profiles')
    op.drop_table('user_profiles')
