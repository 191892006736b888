"""initial_schema

Revision ID: 4c1e9a7d2b10
Revises:
Create Date: 2026-02-13 10:00:00.000000

"""
from typing import Sequence, Union
from datetime import datetime, timezone

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1e9a7d2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Users/profiles, plans, subscriptions, interviews, transcripts and live sessions."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('avatar_url', sa.String(), nullable=True),
        sa.Column('course', sa.String(), nullable=True),
        sa.Column('college', sa.String(), nullable=True),
        sa.Column('graduation_year', sa.Integer(), nullable=True),
        sa.Column('specialization', sa.String(), nullable=True),
        sa.Column('resume_url', sa.String(), nullable=True),
        sa.Column('resume_name', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    plans = op.create_table(
        'plans',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('interval', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=False, server_default='recurring'),
        sa.Column('features', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'subscriptions',
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('razorpay_customer_id', sa.String(), nullable=True),
        sa.Column('razorpay_subscription_id', sa.String(), nullable=True),
        sa.Column('plan_id', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='created'),
        sa.Column('current_period_end', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['plan_id'], ['plans.id']),
        sa.PrimaryKeyConstraint('user_id'),
        sa.UniqueConstraint('razorpay_subscription_id'),
    )
    op.create_index(op.f('ix_subscriptions_razorpay_customer_id'), 'subscriptions', ['razorpay_customer_id'], unique=False)

    op.create_table(
        'interviews',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('config', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='completed'),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('questions_asked', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('warning_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('overall_score', sa.Integer(), nullable=True),
        sa.Column('metrics', sa.JSON(), nullable=True),
        sa.Column('feedback', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_interviews_user_id'), 'interviews', ['user_id'], unique=False)
    op.create_index('idx_interviews_created_at', 'interviews', ['created_at'], unique=False)

    op.create_table(
        'interview_transcripts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('interview_id', sa.String(length=36), nullable=False),
        sa.Column('entries', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['interview_id'], ['interviews.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_interview_transcripts_interview_id'), 'interview_transcripts', ['interview_id'], unique=False)

    op.create_table(
        'interview_sessions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('config', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='in_progress'),
        sa.Column('anti_cheat', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('warning_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_warning', sa.String(), nullable=True),
        sa.Column('look_away_started_ms', sa.Float(), nullable=True),
        sa.Column('interview_id', sa.String(length=36), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['interview_id'], ['interviews.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_interview_sessions_user_id'), 'interview_sessions', ['user_id'], unique=False)

    # Starter catalog; ids are placeholders until init_plans creates real Razorpay plans
    now = datetime.now(timezone.utc)
    op.bulk_insert(plans, [
        {
            'id': 'plan_mock_monthly', 'name': 'Pro Monthly', 'price': 49900,
            'interval': 'monthly', 'type': 'recurring', 'created_at': now,
            'features': ["Unlimited AI Interviews", "Detailed Performance Analysis", "Priority Support", "PDF Reports"],
        },
        {
            'id': 'plan_mock_yearly', 'name': 'Pro Yearly', 'price': 499900,
            'interval': 'yearly', 'type': 'recurring', 'created_at': now,
            'features': ["Everything in Monthly", "2 Months Free", "Exclusive Guidance", "Early Access to New Features"],
        },
        {
            'id': 'plan_day_pass_20', 'name': 'One Day Pass', 'price': 2000,
            'interval': 'daily', 'type': 'one_time', 'created_at': now,
            'features': ["24-Hour Unlimited Access", "Instant Feedback", "No Subscription Commitment", "PDF Reports"],
        },
    ])


def downgrade() -> None:
    op.drop_index(op.f('ix_interview_sessions_user_id'), table_name='interview_sessions')
    op.drop_table('interview_sessions')
    op.drop_index(op.f('ix_interview_transcripts_interview_id'), table_name='interview_transcripts')
    op.drop_table('interview_transcripts')
    op.drop_index('idx_interviews_created_at', table_name='interviews')
    op.drop_index(op.f('ix_interviews_user_id'), table_name='interviews')
    op.drop_table('interviews')
    op.drop_index(op.f('ix_subscriptions_razorpay_customer_id'), table_name='subscriptions')
    op.drop_table('subscriptions')
    op.drop_table('plans')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
