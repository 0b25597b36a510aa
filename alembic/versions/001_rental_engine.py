"""Rental booking engine schema

Revision ID: 001_rental_engine
Revises:
Create Date: 2025-06-01

Adds:
- userrole, rentalstatus, auditaction enums
- users, properties, rentals, property_rental_history, rental_settings, audit_log
- UNIQUE(property_id, user_id, year) on rentals
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = '001_rental_engine'
down_revision = None
branch_labels = None
depends_on = None

USER_ROLES = ('tenant', 'admin')
RENTAL_STATUSES = ('pending', 'approved', 'rejected', 'completed')
AUDIT_ACTIONS = (
    'rental_created',
    'rental_completed',
    'rental_status_changed',
    'rental_deleted',
    'rental_setting_saved',
    'rental_setting_deleted',
)


def upgrade() -> None:
    user_role = postgresql.ENUM(*USER_ROLES, name='userrole', create_type=False)
    rental_status = postgresql.ENUM(*RENTAL_STATUSES, name='rentalstatus', create_type=False)
    audit_action = postgresql.ENUM(*AUDIT_ACTIONS, name='auditaction', create_type=False)
    user_role.create(op.get_bind(), checkfirst=True)
    rental_status.create(op.get_bind(), checkfirst=True)
    audit_action.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('firebase_uid', sa.String(128), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('role', user_role, nullable=False, server_default='tenant'),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_users_firebase_uid', 'users', ['firebase_uid'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'properties',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('owner_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('country', sa.String(100), nullable=False),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('images', postgresql.JSON(), nullable=False, server_default='[]'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_properties_name', 'properties', ['name'], unique=True)

    op.create_table(
        'rentals',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('property_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('status', rental_status, nullable=False, server_default='pending'),
        sa.Column('before_pictures', postgresql.JSON(), nullable=False, server_default='[]'),
        sa.Column('after_pictures', postgresql.JSON(), nullable=False, server_default='[]'),
        sa.Column('condition_report', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('property_id', 'user_id', 'year', name='uq_rentals_property_user_year'),
        sa.CheckConstraint('start_date < end_date', name='ck_rentals_dates'),
    )
    op.create_index('ix_rentals_property_id', 'rentals', ['property_id'])
    op.create_index('ix_rentals_user_id', 'rentals', ['user_id'])
    op.create_index('ix_rentals_status', 'rentals', ['status'])
    op.create_index('ix_rentals_created_at', 'rentals', ['created_at'])

    op.create_table(
        'property_rental_history',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('property_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rental_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('rentals.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('member_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.CheckConstraint('start_date < end_date', name='ck_rental_history_dates'),
    )
    op.create_index('ix_property_rental_history_property_id', 'property_rental_history', ['property_id'])

    op.create_table(
        'rental_settings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('country', sa.String(100), nullable=False),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('min_duration', sa.Integer(), nullable=False),
        sa.Column('max_duration', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('country', 'city', name='uq_rental_settings_location'),
        sa.CheckConstraint('min_duration >= 3', name='ck_rental_settings_min'),
        sa.CheckConstraint('max_duration <= 7', name='ck_rental_settings_max'),
        sa.CheckConstraint('min_duration <= max_duration', name='ck_rental_settings_range'),
    )
    op.create_index('ix_rental_settings_country', 'rental_settings', ['country'])
    op.create_index(
        'uq_rental_settings_country_wide',
        'rental_settings',
        ['country'],
        unique=True,
        postgresql_where=sa.text('city IS NULL'),
    )

    op.create_table(
        'audit_log',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', audit_action, nullable=False),
        sa.Column('resource_type', sa.String(50), nullable=False),
        sa.Column('resource_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('details', postgresql.JSONB(), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_audit_log_user_id', 'audit_log', ['user_id'])
    op.create_index('ix_audit_log_action', 'audit_log', ['action'])


def downgrade() -> None:
    op.drop_table('audit_log')
    op.drop_table('rental_settings')
    op.drop_table('property_rental_history')
    op.drop_table('rentals')
    op.drop_table('properties')
    op.drop_table('users')
    op.execute("DROP TYPE IF EXISTS auditaction")
    op.execute("DROP TYPE IF EXISTS rentalstatus")
    op.execute("DROP TYPE IF EXISTS userrole")
