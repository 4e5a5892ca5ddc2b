"""initial schema for agencies, categories, complaints and accounts

Creates users, agencies, categories, complaints, responses and password_resets.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum('admin', 'agency_admin', 'agency_staff', 'citizen', name='userrole')
complaint_status = sa.Enum('pending', 'in_progress', 'resolved', 'rejected', name='complaintstatus')
priority = sa.Enum('low', 'medium', 'high', 'urgent', name='priority')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'agencies',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_agencies_name', 'agencies', ['name'], unique=True)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('agency_id', sa.Integer(), sa.ForeignKey('agencies.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_name', 'users', ['name'])
    op.create_index('ix_users_agency_id', 'users', ['agency_id'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('agency_id', sa.Integer(), sa.ForeignKey('agencies.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('agency_id', 'name', name='uq_category_agency_name'),
    )
    op.create_index('ix_categories_name', 'categories', ['name'])
    op.create_index('ix_categories_agency_id', 'categories', ['agency_id'])

    op.create_table(
        'complaints',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.String(length=4000), nullable=False),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('agency_id', sa.Integer(), sa.ForeignKey('agencies.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('status', complaint_status, nullable=False),
        sa.Column('priority', priority, nullable=False),
        sa.Column('location', sa.String(length=300), nullable=True),
        sa.Column('contact_phone', sa.String(length=30), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    for col in ('title', 'category_id', 'agency_id', 'user_id', 'status', 'priority', 'created_at'):
        op.create_index(f'ix_complaints_{col}', 'complaints', [col])

    op.create_table(
        'responses',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('complaint_id', sa.Integer(), sa.ForeignKey('complaints.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('content', sa.String(length=4000), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_responses_complaint_id', 'responses', ['complaint_id'])
    op.create_index('ix_responses_user_id', 'responses', ['user_id'])
    op.create_index('ix_responses_created_at', 'responses', ['created_at'])

    op.create_table(
        'password_resets',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token', sa.String(length=128), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('used', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_password_resets_token', 'password_resets', ['token'], unique=True)
    op.create_index('ix_password_resets_user_id', 'password_resets', ['user_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('password_resets')
    op.drop_table('responses')
    op.drop_table('complaints')
    op.drop_table('categories')
    op.drop_table('users')
    op.drop_table('agencies')
    priority.drop(op.get_bind(), checkfirst=True)
    complaint_status.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
