"""Create affiliate ledger tables

Revision ID: 20261018_000001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261018_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'affiliates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=True),
        sa.Column('referral_code', sa.String(length=64), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column(
            'payout_currency', sa.String(length=3),
            nullable=False, server_default='USD'
        ),
        sa.Column(
            'commission_rate', sa.DECIMAL(precision=6, scale=4), nullable=True,
            comment='Override of the default commission rate (0.6000 = 60%)'
        ),
        sa.Column(
            'onboarding_completed', sa.Boolean(),
            nullable=False, server_default=sa.false()
        ),
        sa.Column(
            'is_active', sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deactivated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            'commission_rate IS NULL OR '
            '(commission_rate > 0 AND commission_rate <= 1)',
            name='check_affiliate_commission_rate_range'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_affiliates_user_id', 'affiliates', ['user_id'], unique=True
    )
    op.create_index(
        'ix_affiliates_referral_code', 'affiliates',
        ['referral_code'], unique=True
    )
    op.create_index(
        'ix_affiliates_is_active', 'affiliates', ['is_active'], unique=False
    )

    op.create_table(
        'commissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('payment_id', sa.String(length=128), nullable=False),
        sa.Column('affiliate_id', sa.Integer(), nullable=False),
        sa.Column('referral_id', sa.String(length=64), nullable=True),
        sa.Column('referral_code', sa.String(length=64), nullable=True),
        sa.Column('commission_type', sa.String(length=32), nullable=False),
        sa.Column('source', sa.String(length=32), nullable=False),
        sa.Column(
            'base_amount', sa.DECIMAL(precision=18, scale=8), nullable=False
        ),
        sa.Column('base_currency', sa.String(length=3), nullable=False),
        sa.Column(
            'base_amount_reference', sa.DECIMAL(precision=18, scale=8),
            nullable=False,
            comment='base_amount converted to the reference currency'
        ),
        sa.Column(
            'commission_rate', sa.DECIMAL(precision=6, scale=4),
            nullable=False,
            comment='Rate applied at creation time, never recalculated'
        ),
        sa.Column(
            'commission_amount', sa.DECIMAL(precision=18, scale=8),
            nullable=False
        ),
        sa.Column('commission_currency', sa.String(length=3), nullable=False),
        sa.Column(
            'status', sa.String(length=20), nullable=False,
            server_default='available',
            comment='pending, available, paid, cancelled'
        ),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            'base_amount > 0', name='check_commission_base_amount_positive'
        ),
        sa.CheckConstraint(
            'commission_amount >= 0',
            name='check_commission_amount_non_negative'
        ),
        sa.ForeignKeyConstraint(
            ['affiliate_id'], ['affiliates.id'], ondelete='RESTRICT'
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('payment_id', name='uq_commissions_payment_id')
    )
    op.create_index(
        'ix_commissions_affiliate_id', 'commissions',
        ['affiliate_id'], unique=False
    )
    op.create_index(
        'ix_commissions_status', 'commissions', ['status'], unique=False
    )
    op.create_index(
        'idx_commissions_affiliate_status', 'commissions',
        ['affiliate_id', 'status'], unique=False
    )
    op.create_index(
        'idx_commissions_created_at', 'commissions',
        ['created_at'], unique=False
    )

    op.create_table(
        'memberships',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            'is_active', sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_memberships_user_id', 'memberships', ['user_id'], unique=False
    )
    op.create_index(
        'idx_memberships_active_expires', 'memberships',
        ['is_active', 'expires_at'], unique=False
    )

    op.create_table(
        'membership_expiry_notifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('membership_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column(
            'kind', sa.String(length=32), nullable=False,
            comment='seven_day_warning, day_of_warning, expired'
        ),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'membership_id', 'kind',
            name='uq_membership_expiry_notifications_kind'
        )
    )
    op.create_index(
        'ix_membership_expiry_notifications_membership_id',
        'membership_expiry_notifications', ['membership_id'], unique=False
    )


def downgrade() -> None:
    op.drop_index(
        'ix_membership_expiry_notifications_membership_id',
        table_name='membership_expiry_notifications'
    )
    op.drop_table('membership_expiry_notifications')

    op.drop_index('idx_memberships_active_expires', table_name='memberships')
    op.drop_index('ix_memberships_user_id', table_name='memberships')
    op.drop_table('memberships')

    op.drop_index('idx_commissions_created_at', table_name='commissions')
    op.drop_index(
        'idx_commissions_affiliate_status', table_name='commissions'
    )
    op.drop_index('ix_commissions_status', table_name='commissions')
    op.drop_index('ix_commissions_affiliate_id', table_name='commissions')
    op.drop_table('commissions')

    op.drop_index('ix_affiliates_is_active', table_name='affiliates')
    op.drop_index('ix_affiliates_referral_code', table_name='affiliates')
    op.drop_index('ix_affiliates_user_id', table_name='affiliates')
    op.drop_table('affiliates')
