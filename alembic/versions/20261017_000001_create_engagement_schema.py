"""Create engagement schema.

Revision ID: 20261017_000001
Revises:
Create Date: 2026-10-17

Users, referrals, community challenges, participants, progress,
achievements, credit ledger and the pending side effect queue.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261017_000001'
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column(
        'created_at',
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text('now()'),
    )


def upgrade() -> None:
    """Create engagement tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=True),
        _created_at(),
        sa.Column(
            'credit_balance',
            sa.DECIMAL(precision=12, scale=2),
            nullable=False,
            server_default='0',
        ),
        sa.Column(
            'referral_credits_earned',
            sa.DECIMAL(precision=12, scale=2),
            nullable=False,
            server_default='0',
            comment='Lifetime credits earned as a referrer',
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            'credit_balance >= 0',
            name='check_user_credit_balance_non_negative',
        ),
    )

    op.create_table(
        'referrals',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('referrer_id', sa.Uuid(), nullable=False),
        sa.Column('referee_id', sa.Uuid(), nullable=True),
        sa.Column('code', sa.String(length=8), nullable=False),
        sa.Column('method', sa.String(length=20), nullable=False),
        sa.Column('source', sa.String(length=20), nullable=False),
        sa.Column(
            'invited_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()'),
        ),
        sa.Column('signed_up_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'first_purchase_at', sa.DateTime(timezone=True), nullable=True
        ),
        sa.Column(
            'status',
            sa.String(length=20),
            nullable=False,
            server_default='pending',
            comment='pending, earned, credited, expired',
        ),
        sa.Column(
            'reward_amount', sa.DECIMAL(precision=12, scale=2), nullable=True
        ),
        sa.Column(
            'bonus_tier',
            sa.DECIMAL(precision=3, scale=1),
            nullable=False,
            server_default='1.0',
        ),
        sa.Column('metadata', sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['referrer_id'], ['users.id'], ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['referee_id'], ['users.id'], ondelete='SET NULL'
        ),
        sa.CheckConstraint(
            'referee_id IS NULL OR referee_id <> referrer_id',
            name='check_referral_not_self',
        ),
    )
    op.create_index('ix_referrals_code', 'referrals', ['code'], unique=True)
    op.create_index(
        'idx_referrals_referrer_status', 'referrals', ['referrer_id', 'status']
    )
    op.create_index(
        'idx_referrals_referee_status', 'referrals', ['referee_id', 'status']
    )

    op.create_table(
        'community_challenges',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('challenge_type', sa.String(length=20), nullable=False),
        sa.Column(
            'difficulty_level', sa.Integer(), nullable=False, server_default='1'
        ),
        sa.Column('duration_days', sa.Integer(), nullable=False),
        sa.Column('max_participants', sa.Integer(), nullable=True),
        sa.Column('entry_requirements', sa.JSON(), nullable=True),
        sa.Column('success_criteria', sa.JSON(), nullable=False),
        sa.Column('reward_structure', sa.JSON(), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column(
            'is_public', sa.Boolean(), nullable=False, server_default='true'
        ),
        sa.Column(
            'is_active', sa.Boolean(), nullable=False, server_default='true'
        ),
        sa.Column(
            'featured_priority', sa.Integer(), nullable=False, server_default='0'
        ),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['created_by'], ['users.id'], ondelete='SET NULL'
        ),
        sa.CheckConstraint(
            'difficulty_level BETWEEN 1 AND 5',
            name='check_challenge_difficulty_range',
        ),
        sa.CheckConstraint(
            'duration_days > 0', name='check_challenge_duration_positive'
        ),
    )
    op.create_index(
        'idx_challenges_public_active_priority',
        'community_challenges',
        ['is_public', 'is_active', 'featured_priority'],
    )

    op.create_table(
        'challenge_participants',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('challenge_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column(
            'joined_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()'),
        ),
        sa.Column(
            'status',
            sa.String(length=20),
            nullable=False,
            server_default='active',
            comment='active, completed, failed, withdrawn',
        ),
        sa.Column(
            'completion_date', sa.DateTime(timezone=True), nullable=True
        ),
        sa.Column(
            'final_score', sa.Integer(), nullable=False, server_default='0'
        ),
        sa.Column('rank_position', sa.Integer(), nullable=True),
        sa.Column('rewards_earned', sa.JSON(), nullable=True),
        sa.Column(
            'is_visible', sa.Boolean(), nullable=False, server_default='true'
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['challenge_id'], ['community_challenges.id'], ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint(
            'challenge_id', 'user_id', name='uq_participant_challenge_user'
        ),
        sa.CheckConstraint(
            'final_score >= 0', name='check_participant_score_non_negative'
        ),
    )
    op.create_index(
        'idx_participants_challenge_score',
        'challenge_participants',
        ['challenge_id', 'final_score'],
    )

    op.create_table(
        'challenge_progress',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('participant_id', sa.Uuid(), nullable=False),
        sa.Column('progress_date', sa.Date(), nullable=False),
        sa.Column('progress_data', sa.JSON(), nullable=False),
        sa.Column('daily_score', sa.Integer(), nullable=False),
        sa.Column('cumulative_score', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column(
            'auto_generated',
            sa.Boolean(),
            nullable=False,
            server_default='false',
        ),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['participant_id'],
            ['challenge_participants.id'],
            ondelete='CASCADE',
        ),
        sa.UniqueConstraint(
            'participant_id',
            'progress_date',
            name='uq_progress_participant_date',
        ),
    )
    op.create_index(
        'ix_challenge_progress_participant_id',
        'challenge_progress',
        ['participant_id'],
    )

    op.create_table(
        'social_achievements',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('achievement_type', sa.String(length=40), nullable=False),
        sa.Column('achievement_name', sa.String(length=160), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('related_entity_id', sa.Uuid(), nullable=True),
        sa.Column('related_entity_type', sa.String(length=40), nullable=True),
        sa.Column(
            'points_awarded', sa.Integer(), nullable=False, server_default='0'
        ),
        sa.Column('badge_awarded', sa.String(length=120), nullable=True),
        sa.Column('special_reward', sa.JSON(), nullable=True),
        sa.Column(
            'is_public', sa.Boolean(), nullable=False, server_default='true'
        ),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index(
        'ix_social_achievements_user_id', 'social_achievements', ['user_id']
    )

    op.create_table(
        'credit_transactions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('amount', sa.DECIMAL(precision=12, scale=2), nullable=False),
        sa.Column('reason', sa.String(length=60), nullable=False),
        sa.Column('reference_id', sa.Uuid(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint('amount > 0', name='check_credit_amount_positive'),
    )
    op.create_index(
        'ix_credit_transactions_user_id', 'credit_transactions', ['user_id']
    )

    op.create_table(
        'pending_side_effects',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('kind', sa.String(length=30), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column(
            'status',
            sa.String(length=20),
            nullable=False,
            server_default='pending',
            comment='pending, done, failed',
        ),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_error', sa.Text(), nullable=True),
        _created_at(),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'idx_side_effects_status_created',
        'pending_side_effects',
        ['status', 'created_at'],
    )


def downgrade() -> None:
    """Drop engagement tables."""
    op.drop_index(
        'idx_side_effects_status_created', table_name='pending_side_effects'
    )
    op.drop_table('pending_side_effects')
    op.drop_index(
        'ix_credit_transactions_user_id', table_name='credit_transactions'
    )
    op.drop_table('credit_transactions')
    op.drop_index(
        'ix_social_achievements_user_id', table_name='social_achievements'
    )
    op.drop_table('social_achievements')
    op.drop_index(
        'ix_challenge_progress_participant_id', table_name='challenge_progress'
    )
    op.drop_table('challenge_progress')
    op.drop_index(
        'idx_participants_challenge_score', table_name='challenge_participants'
    )
    op.drop_table('challenge_participants')
    op.drop_index(
        'idx_challenges_public_active_priority',
        table_name='community_challenges',
    )
    op.drop_table('community_challenges')
    op.drop_index('idx_referrals_referee_status', table_name='referrals')
    op.drop_index('idx_referrals_referrer_status', table_name='referrals')
    op.drop_index('ix_referrals_code', table_name='referrals')
    op.drop_table('referrals')
    op.drop_table('users')
