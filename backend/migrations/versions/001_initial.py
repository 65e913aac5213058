"""Initial schema: organizations, users, memberships, plans, subscriptions, audit logs

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union
import time
import uuid

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Default plan definitions
DEFAULT_PLANS = {
    "free": {
        "name": "Free",
        "price": 0.00,
        "features": {"storage": "1GB", "users": "1", "support": "Community"},
        "limits": {"api_calls_per_month": 1000, "max_users": 1, "storage_gb": 1},
    },
    "pro": {
        "name": "Pro",
        "price": 29.00,
        "features": {"storage": "50GB", "users": "10", "support": "Email"},
        "limits": {"api_calls_per_month": 100000, "max_users": 10, "storage_gb": 50},
    },
    "enterprise": {
        "name": "Enterprise",
        "price": 99.00,
        "features": {"storage": "Unlimited", "users": "Unlimited", "support": "Priority"},
        "limits": {"api_calls_per_month": -1, "max_users": -1, "storage_gb": -1},
    },
}


def upgrade() -> None:
    # Organizations table
    op.create_table(
        'organizations',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
        sa.Column('updated_at', sa.BigInteger(), nullable=False),
        sa.Column('deleted_at', sa.BigInteger(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_organizations_slug', 'organizations', ['slug'], unique=True)
    op.create_index('ix_organizations_deleted_at', 'organizations', ['deleted_at'])

    # Users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('system_role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('email_verified', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('email_verified_at', sa.BigInteger(), nullable=True),
        sa.Column('verification_token', sa.String(64), nullable=True),
        sa.Column('refresh_token', sa.String(255), nullable=True),
        sa.Column('refresh_token_expires_at', sa.BigInteger(), nullable=True),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
        sa.Column('updated_at', sa.BigInteger(), nullable=False),
        sa.Column('deleted_at', sa.BigInteger(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_system_role', 'users', ['system_role'])
    op.create_index('ix_users_verification_token', 'users', ['verification_token'], unique=True)
    op.create_index('ix_users_refresh_token', 'users', ['refresh_token'])
    op.create_index('ix_users_organization_id', 'users', ['organization_id'])
    op.create_index('ix_users_deleted_at', 'users', ['deleted_at'])

    # Organization members table
    op.create_table(
        'organization_members',
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='member'),
        sa.Column('joined_at', sa.BigInteger(), nullable=False),
        sa.Column('deleted_at', sa.BigInteger(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('organization_id', 'user_id')
    )
    op.create_index('ix_organization_members_role', 'organization_members', ['role'])
    op.create_index('ix_organization_members_deleted_at', 'organization_members', ['deleted_at'])

    # Plans table
    op.create_table(
        'plans',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('billing_period', sa.String(20), nullable=False, server_default='monthly'),
        sa.Column('features', postgresql.JSONB(), nullable=False, server_default='{}'),
        sa.Column('limits', postgresql.JSONB(), nullable=False, server_default='{}'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
        sa.Column('updated_at', sa.BigInteger(), nullable=False),
        sa.Column('deleted_at', sa.BigInteger(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_plans_slug', 'plans', ['slug'], unique=True)
    op.create_index('ix_plans_deleted_at', 'plans', ['deleted_at'])

    # Subscriptions table
    op.create_table(
        'subscriptions',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('plan_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('current_period_start', sa.BigInteger(), nullable=False),
        sa.Column('current_period_end', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
        sa.Column('updated_at', sa.BigInteger(), nullable=False),
        sa.Column('deleted_at', sa.BigInteger(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.ForeignKeyConstraint(['plan_id'], ['plans.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_subscriptions_organization_id', 'subscriptions', ['organization_id'])
    op.create_index('ix_subscriptions_deleted_at', 'subscriptions', ['deleted_at'])

    # Audit logs table
    op.create_table(
        'audit_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('resource', sa.String(100), nullable=False),
        sa.Column('resource_id', sa.String(100), nullable=False),
        sa.Column('details', postgresql.JSONB(), nullable=False, server_default='{}'),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.String(255), nullable=True),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
        sa.Column('deleted_at', sa.BigInteger(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_organization_id', 'audit_logs', ['organization_id'])

    # Insert default plans
    plans_table = sa.table(
        'plans',
        sa.column('id', postgresql.UUID(as_uuid=True)),
        sa.column('name', sa.String(100)),
        sa.column('slug', sa.String(100)),
        sa.column('price', sa.Numeric(10, 2)),
        sa.column('billing_period', sa.String(20)),
        sa.column('features', postgresql.JSONB()),
        sa.column('limits', postgresql.JSONB()),
        sa.column('is_active', sa.Boolean()),
        sa.column('created_at', sa.BigInteger()),
        sa.column('updated_at', sa.BigInteger()),
    )

    now = int(time.time() * 1000)
    for slug, plan_data in DEFAULT_PLANS.items():
        op.execute(
            plans_table.insert().values(
                id=uuid.uuid4(),
                name=plan_data['name'],
                slug=slug,
                price=plan_data['price'],
                billing_period='monthly',
                features=plan_data['features'],
                limits=plan_data['limits'],
                is_active=True,
                created_at=now,
                updated_at=now,
            )
        )


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('subscriptions')
    op.drop_table('plans')
    op.drop_table('organization_members')
    op.drop_table('users')
    op.drop_table('organizations')
