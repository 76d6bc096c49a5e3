"""Initial gaming wallet schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create wallets table
    op.create_table('wallets',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('btc_balance', sa.Numeric(precision=30, scale=8), nullable=False, server_default='0'),
        sa.Column('eth_balance', sa.Numeric(precision=30, scale=8), nullable=False, server_default='0'),
        sa.Column('vest_balance', sa.Numeric(precision=30, scale=8), nullable=False, server_default='0'),
        sa.Column('total_wagered', sa.Numeric(precision=30, scale=8), nullable=False, server_default='0'),
        sa.Column('total_won', sa.Numeric(precision=30, scale=8), nullable=False, server_default='0'),
        sa.Column('total_lost', sa.Numeric(precision=30, scale=8), nullable=False, server_default='0'),
        sa.Column('last_activity', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
        sa.CheckConstraint('btc_balance >= 0', name='chk_btc_nonneg'),
        sa.CheckConstraint('eth_balance >= 0', name='chk_eth_nonneg'),
        sa.CheckConstraint('vest_balance >= 0', name='chk_vest_nonneg')
    )

    # Create game_transactions table
    op.create_table('game_transactions',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('tx_type', sa.String(length=32), nullable=False),
        sa.Column('amount', sa.Numeric(precision=30, scale=8), nullable=False),
        sa.Column('currency', sa.String(length=16), nullable=False),
        sa.Column('balance_after', sa.Numeric(precision=30, scale=8), nullable=False),
        sa.Column('related_entity', sa.String(length=64), nullable=True),
        sa.Column('related_id', sa.String(length=64), nullable=True),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    # Create bets table
    op.create_table('bets',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('game_type', sa.String(length=16), nullable=False),
        sa.Column('game_id', sa.String(length=64), nullable=False),
        sa.Column('amount', sa.Numeric(precision=30, scale=8), nullable=False),
        sa.Column('currency', sa.String(length=16), nullable=False),
        sa.Column('odds', sa.Numeric(precision=20, scale=8), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('payout', sa.Numeric(precision=30, scale=8), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('placed_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('settled_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='chk_bet_amount_pos'),
        sa.CheckConstraint('odds >= 1', name='chk_bet_odds_min')
    )

    # Create bet_legs table
    op.create_table('bet_legs',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('bet_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('match_id', sa.String(length=64), nullable=False),
        sa.Column('selection', sa.String(length=16), nullable=False),
        sa.Column('odds', sa.Numeric(precision=20, scale=8), nullable=False),
        sa.Column('result', sa.String(length=16), nullable=False, server_default='pending'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['bet_id'], ['bets.id'], ondelete='CASCADE')
    )

    # Create sports_matches table
    op.create_table('sports_matches',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('sport', sa.String(length=32), nullable=False),
        sa.Column('league', sa.String(length=128), nullable=True),
        sa.Column('home_team', sa.String(length=128), nullable=False),
        sa.Column('away_team', sa.String(length=128), nullable=False),
        sa.Column('start_time', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='upcoming'),
        sa.Column('odds_home_win', sa.Numeric(precision=20, scale=8), nullable=False),
        sa.Column('odds_away_win', sa.Numeric(precision=20, scale=8), nullable=False),
        sa.Column('odds_draw', sa.Numeric(precision=20, scale=8), nullable=True),
        sa.Column('result', sa.String(length=16), nullable=True),
        sa.Column('home_score', sa.Integer(), nullable=True),
        sa.Column('away_score', sa.Integer(), nullable=True),
        sa.Column('total_bets', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id')
    )

    # Create lottery tables
    op.create_table('lottery_draws',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('draw_type', sa.String(length=16), nullable=False),
        sa.Column('ticket_price', sa.Numeric(precision=30, scale=8), nullable=False),
        sa.Column('currency', sa.String(length=16), nullable=False),
        sa.Column('max_numbers', sa.Integer(), nullable=False),
        sa.Column('number_range', sa.Integer(), nullable=False),
        sa.Column('max_tickets', sa.Integer(), nullable=True),
        sa.Column('sold_tickets', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('prize_pool', sa.Numeric(precision=30, scale=8), nullable=True),
        sa.Column('draw_date', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('winning_numbers', sa.JSON(), nullable=True),
        sa.Column('prize_table', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('lottery_tickets',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('draw_id', sa.String(length=64), nullable=False),
        sa.Column('bet_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('numbers', sa.JSON(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('total_cost', sa.Numeric(precision=30, scale=8), nullable=False),
        sa.Column('currency', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('is_winner', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('matched_count', sa.Integer(), nullable=True),
        sa.Column('prize_amount', sa.Numeric(precision=30, scale=8), nullable=True),
        sa.Column('purchased_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['draw_id'], ['lottery_draws.id']),
        sa.ForeignKeyConstraint(['bet_id'], ['bets.id'])
    )

    # Create casino_games table
    op.create_table('casino_games',
        sa.Column('code', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('min_bet', sa.Numeric(precision=30, scale=8), nullable=False),
        sa.Column('max_bet', sa.Numeric(precision=30, scale=8), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.PrimaryKeyConstraint('code')
    )

    # Create prediction tables
    op.create_table('prediction_markets',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.String(length=1024), nullable=True),
        sa.Column('category', sa.String(length=32), nullable=False, server_default='crypto'),
        sa.Column('end_date', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('resolve_date', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('winning_option_id', sa.String(length=64), nullable=True),
        sa.Column('total_pool', sa.Numeric(precision=30, scale=8), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('prediction_options',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('market_id', sa.String(length=64), nullable=False),
        sa.Column('text', sa.String(length=255), nullable=False),
        sa.Column('odds', sa.Numeric(precision=20, scale=8), nullable=False),
        sa.Column('total_bets', sa.Numeric(precision=30, scale=8), nullable=False, server_default='0'),
        sa.Column('backers', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['market_id'], ['prediction_markets.id'])
    )

    # Create staking and vesting catalog tables
    op.create_table('staking_pools',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('asset', sa.String(length=16), nullable=False),
        sa.Column('apy', sa.Numeric(precision=10, scale=4), nullable=False),
        sa.Column('min_stake', sa.Numeric(precision=30, scale=8), nullable=False),
        sa.Column('lock_period_days', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('reward_frequency', sa.String(length=16), nullable=False, server_default='daily'),
        sa.Column('early_unstake_penalty', sa.Numeric(precision=10, scale=4), nullable=False, server_default='0'),
        sa.Column('total_staked', sa.Numeric(precision=30, scale=8), nullable=False, server_default='0'),
        sa.Column('risk_level', sa.String(length=16), nullable=False, server_default='low'),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('vesting_plans',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('min_investment', sa.Numeric(precision=30, scale=8), nullable=False),
        sa.Column('max_investment', sa.Numeric(precision=30, scale=8), nullable=False),
        sa.Column('duration_days', sa.Integer(), nullable=False),
        sa.Column('apy', sa.Numeric(precision=10, scale=4), nullable=False),
        sa.Column('compounding_frequency', sa.String(length=16), nullable=False, server_default='monthly'),
        sa.Column('early_withdrawal_penalty', sa.Numeric(precision=10, scale=4), nullable=False, server_default='0'),
        sa.Column('supported_assets', sa.JSON(), nullable=False),
        sa.Column('risk_level', sa.String(length=16), nullable=False, server_default='low'),
        sa.PrimaryKeyConstraint('id')
    )

    # Create position tables; both carry the same snapshot of plan terms
    for table, ref_column, flag_column, flag_default in (
        ('staking_positions', 'pool_id', 'auto_compound', 'true'),
        ('vesting_positions', 'plan_id', 'auto_reinvest', 'false'),
    ):
        op.create_table(table,
            sa.Column('id', sa.String(length=64), nullable=False),
            sa.Column('user_id', sa.String(length=64), nullable=False),
            sa.Column(ref_column, sa.String(length=64), nullable=False),
            sa.Column('asset', sa.String(length=16), nullable=False),
            sa.Column('amount', sa.Numeric(precision=30, scale=8), nullable=False),
            sa.Column('apy', sa.Numeric(precision=10, scale=4), nullable=False),
            sa.Column('compounding_frequency', sa.String(length=16), nullable=False),
            sa.Column('penalty_pct', sa.Numeric(precision=10, scale=4), nullable=False, server_default='0'),
            sa.Column(flag_column, sa.Boolean(), nullable=False, server_default=flag_default),
            sa.Column('start_date', sa.TIMESTAMP(timezone=True), nullable=False),
            sa.Column('end_date', sa.TIMESTAMP(timezone=True), nullable=True),
            sa.Column('status', sa.String(length=24), nullable=False, server_default='active'),
            sa.Column('earned_rewards', sa.Numeric(precision=30, scale=8), nullable=False, server_default='0'),
            sa.Column('last_reward_date', sa.TIMESTAMP(timezone=True), nullable=False),
            sa.Column('payout', sa.Numeric(precision=30, scale=8), nullable=True),
            sa.Column('penalty', sa.Numeric(precision=30, scale=8), nullable=True),
            sa.Column('closed_at', sa.TIMESTAMP(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )

    # Create indexes
    op.create_index('ix_game_transactions_user_id', 'game_transactions', ['user_id'])
    op.create_index('ix_game_transactions_created_at', 'game_transactions', ['created_at'])
    op.create_index('ix_bets_user_id', 'bets', ['user_id'])
    op.create_index('ix_bets_game_id', 'bets', ['game_id'])
    op.create_index('ix_bet_legs_match_id', 'bet_legs', ['match_id'])
    op.create_index('ix_lottery_tickets_user_id', 'lottery_tickets', ['user_id'])
    op.create_index('ix_lottery_tickets_draw_id', 'lottery_tickets', ['draw_id'])
    op.create_index('ix_prediction_options_market_id', 'prediction_options', ['market_id'])
    op.create_index('ix_staking_positions_user_id', 'staking_positions', ['user_id'])
    op.create_index('ix_staking_positions_pool_id', 'staking_positions', ['pool_id'])
    op.create_index('ix_vesting_positions_user_id', 'vesting_positions', ['user_id'])
    op.create_index('ix_vesting_positions_plan_id', 'vesting_positions', ['plan_id'])


def downgrade() -> None:
    # Drop tables
    op.drop_table('vesting_positions')
    op.drop_table('staking_positions')
    op.drop_table('vesting_plans')
    op.drop_table('staking_pools')
    op.drop_table('prediction_options')
    op.drop_table('prediction_markets')
    op.drop_table('casino_games')
    op.drop_table('lottery_tickets')
    op.drop_table('lottery_draws')
    op.drop_table('sports_matches')
    op.drop_table('bet_legs')
    op.drop_table('bets')
    op.drop_table('game_transactions')
    op.drop_table('wallets')
