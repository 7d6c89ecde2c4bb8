"""Initial schema: tenants, plans, members, payments, attendance

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001_initial_schema'
down_revision = None

# Enum columns store member names, matching the SQLModel mapping
tenant_role = sa.Enum('ADMIN', 'TRAINER', name='tenantrole')
member_status = sa.Enum('ACTIVE', 'INACTIVE', name='memberstatus')
gender = sa.Enum('MALE', 'FEMALE', 'OTHER', name='gender')
payment_method = sa.Enum('CASH', 'UPI', 'CARD', name='paymentmethod')
marked_by = sa.Enum('MANUAL', 'QR_SELF', 'QR_ADMIN', name='markedby')


def upgrade():
    op.create_table(
        'tenants',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('role', tenant_role, nullable=False),
        sa.Column('gym_name', sa.String(200), nullable=True),
        sa.Column('gym_code', sa.String(50), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('opening_time', sa.String(5), nullable=True),
        sa.Column('closing_time', sa.String(5), nullable=True),
        sa.Column('renewal_reminder_days', sa.Integer(), nullable=False),
        sa.Column('low_attendance_threshold', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_tenants_email', 'tenants', ['email'], unique=True)
    op.create_index('ix_tenants_gym_code', 'tenants', ['gym_code'], unique=True)
    op.create_index('ix_tenants_is_active', 'tenants', ['is_active'])

    op.create_table(
        'membership_plans',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Uuid(), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('duration_months', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.UniqueConstraint('tenant_id', 'name', name='uq_plan_tenant_name'),
    )
    op.create_index('ix_membership_plans_tenant_id', 'membership_plans', ['tenant_id'])

    op.create_table(
        'members',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Uuid(), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('gender', gender, nullable=False),
        sa.Column('dob', sa.Date(), nullable=True),
        sa.Column('notes', sa.String(500), nullable=True),
        sa.Column('plan', sa.String(50), nullable=False),
        sa.Column('join_date', sa.Date(), nullable=False),
        sa.Column('renewal_date', sa.Date(), nullable=False),
        sa.Column('expiry_date', sa.Date(), nullable=False),
        sa.Column('status', member_status, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('tenant_id', 'email', name='uq_member_tenant_email'),
    )
    op.create_index('ix_members_tenant_id', 'members', ['tenant_id'])
    op.create_index('ix_members_name', 'members', ['name'])
    op.create_index('ix_members_phone', 'members', ['phone'])
    op.create_index('ix_members_expiry_date', 'members', ['expiry_date'])
    op.create_index('ix_members_status', 'members', ['status'])
    op.create_index('ix_members_created_at', 'members', ['created_at'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Uuid(), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('member_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('method', payment_method, nullable=False),
        sa.Column('plan', sa.String(50), nullable=False),
        sa.Column('paid_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_payments_tenant_id', 'payments', ['tenant_id'])
    op.create_index('ix_payments_member_id', 'payments', ['member_id'])
    op.create_index('ix_payments_method', 'payments', ['method'])
    op.create_index('ix_payments_paid_at', 'payments', ['paid_at'])

    op.create_table(
        'attendance',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Uuid(), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('member_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('attended_on', sa.Date(), nullable=False),
        sa.Column('check_in_time', sa.String(8), nullable=False),
        sa.Column('marked_by', marked_by, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('tenant_id', 'member_id', 'attended_on', name='uq_attendance_member_day'),
    )
    op.create_index('ix_attendance_tenant_id', 'attendance', ['tenant_id'])
    op.create_index('ix_attendance_member_id', 'attendance', ['member_id'])
    op.create_index('ix_attendance_attended_on', 'attendance', ['attended_on'])


def downgrade():
    op.drop_table('attendance')
    op.drop_table('payments')
    op.drop_table('members')
    op.drop_table('membership_plans')
    op.drop_table('tenants')

    bind = op.get_bind()
    for enum in (marked_by, payment_method, member_status, gender, tenant_role):
        enum.drop(bind, checkfirst=True)
