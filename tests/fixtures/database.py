"""
Database-specific test fixtures and utilities: catalog rows and funded wallets
"""

import asyncio
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gamewallet.models.casino import CasinoGame
from gamewallet.models.lottery import LotteryDraw
from gamewallet.models.match import SportsMatch
from gamewallet.models.prediction import PredictionMarket, PredictionOption
from gamewallet.models.staking import StakingPool, VestingPlan
from gamewallet.models.transaction import GameTransaction
from gamewallet.services.gaming import GamingService
from tests.fixtures.clock import START


async def _save(session_factory: async_sessionmaker, *rows):
    async with session_factory() as session:
        session.add_all(rows)
        await session.commit()
    return rows[0] if len(rows) == 1 else rows


async def create_test_wallet(service: GamingService, user_id: str, **balances: str):
    """Open a wallet and deposit the given balances, e.g. BTC="0.01"."""
    wallet = await service.open_wallet(user_id)
    for currency, amount in balances.items():
        wallet = await service.deposit(user_id, currency, amount)
    return wallet


async def create_test_match(
    session_factory: async_sessionmaker,
    home_team: str = "Kansas City Chiefs",
    away_team: str = "Buffalo Bills",
    odds_home_win: str = "1.85",
    odds_away_win: str = "2.10",
    odds_draw: Optional[str] = None,
    status: str = "upcoming",
    sport: str = "football",
) -> SportsMatch:
    return await _save(session_factory, SportsMatch(
        sport=sport,
        league="Test League",
        home_team=home_team,
        away_team=away_team,
        start_time=START + timedelta(days=1),
        status=status,
        odds_home_win=Decimal(odds_home_win),
        odds_away_win=Decimal(odds_away_win),
        odds_draw=Decimal(odds_draw) if odds_draw else None,
        total_bets=0,
    ))


async def create_test_draw(
    session_factory: async_sessionmaker,
    draw_type: str = "daily",
    ticket_price: str = "0.001",
    currency: str = "BTC",
    max_numbers: int = 3,
    number_range: int = 10,
    draw_date: Optional[datetime] = START + timedelta(days=1),
    prize_table: Optional[Dict[str, str]] = None,
    max_tickets: Optional[int] = None,
    status: str = "active",
) -> LotteryDraw:
    return await _save(session_factory, LotteryDraw(
        name=f"Test {draw_type} draw",
        draw_type=draw_type,
        ticket_price=Decimal(ticket_price),
        currency=currency,
        max_numbers=max_numbers,
        number_range=number_range,
        max_tickets=max_tickets,
        sold_tickets=0,
        prize_pool=Decimal("0"),
        draw_date=draw_date if draw_type != "instant" else None,
        status=status,
        prize_table=prize_table if prize_table is not None else {"2": "2", "3": "20"},
    ))


async def create_test_casino_games(
    session_factory: async_sessionmaker,
    min_bet: str = "0.0001",
    max_bet: str = "10",
    inactive: Sequence[str] = (),
) -> List[CasinoGame]:
    games = [
        CasinoGame(
            code=code,
            name=code.replace("_", " ").title(),
            min_bet=Decimal(min_bet),
            max_bet=Decimal(max_bet),
            is_active=code not in inactive,
        )
        for code in ("dice", "slots", "roulette", "spin_wheel")
    ]
    return await _save(session_factory, *games)


async def create_test_market(
    session_factory: async_sessionmaker,
    options: Sequence[Tuple[str, str, str]] = (("yes", "Yes", "2.10"), ("no", "No", "1.75")),
    end_date: datetime = START + timedelta(days=30),
    status: str = "active",
) -> PredictionMarket:
    """Options are (id, text, odds) triples."""
    async with session_factory() as session:
        market = PredictionMarket(
            title="Will BTC close above $100,000 this month?",
            category="crypto",
            end_date=end_date,
            status=status,
            total_pool=Decimal("0"),
        )
        session.add(market)
        await session.flush()
        for option_id, text, odds in options:
            session.add(PredictionOption(
                id=option_id, market_id=market.id, text=text, odds=Decimal(odds),
                total_bets=Decimal("0"), backers=0,
            ))
        await session.commit()
        market_id = market.id

    async with session_factory() as session:
        result = await session.execute(select(PredictionMarket).where(PredictionMarket.id == market_id))
        return result.scalar_one()


async def create_test_pool(
    session_factory: async_sessionmaker,
    asset: str = "BTC",
    apy: str = "10",
    min_stake: str = "0.001",
    lock_period_days: int = 365,
    reward_frequency: str = "daily",
    early_unstake_penalty: str = "1.5",
) -> StakingPool:
    return await _save(session_factory, StakingPool(
        name=f"{asset} pool",
        asset=asset,
        apy=Decimal(apy),
        min_stake=Decimal(min_stake),
        lock_period_days=lock_period_days,
        reward_frequency=reward_frequency,
        early_unstake_penalty=Decimal(early_unstake_penalty),
        total_staked=Decimal("0"),
        risk_level="low",
    ))


async def create_test_plan(
    session_factory: async_sessionmaker,
    min_investment: str = "100",
    max_investment: str = "5000",
    duration_days: int = 90,
    apy: str = "8.5",
    compounding_frequency: str = "monthly",
    early_withdrawal_penalty: str = "2",
    supported_assets: Sequence[str] = ("BTC", "ETH", "VEST"),
) -> VestingPlan:
    return await _save(session_factory, VestingPlan(
        name="Crypto Starter",
        min_investment=Decimal(min_investment),
        max_investment=Decimal(max_investment),
        duration_days=duration_days,
        apy=Decimal(apy),
        compounding_frequency=compounding_frequency,
        early_withdrawal_penalty=Decimal(early_withdrawal_penalty),
        supported_assets=list(supported_assets),
        risk_level="low",
    ))


async def get_journal(session_factory: async_sessionmaker, user_id: str) -> List[GameTransaction]:
    """Journal entries for a user, oldest first."""
    async with session_factory() as session:
        result = await session.execute(
            select(GameTransaction)
            .where(GameTransaction.user_id == user_id)
            .order_by(GameTransaction.created_at)
        )
        return list(result.scalars().all())


async def assert_wallet_balance(service: GamingService, user_id: str, **expected: str):
    """Assert wallet balances match, e.g. BTC="0.009"."""
    wallet = await service.get_wallet(user_id)
    for currency, amount in expected.items():
        assert wallet.balance_of(currency) == Decimal(amount), (
            f"{currency}: expected {amount}, got {wallet.balance_of(currency)}"
        )


async def run_concurrently(*operations) -> list:
    """Run coroutines together; exceptions are returned, not raised."""
    return await asyncio.gather(*operations, return_exceptions=True)
