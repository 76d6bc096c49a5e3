#!/usr/bin/env python3
"""
Seed script for the game catalog
Creates the staking pools, vesting plans, lottery draws, casino tables,
sports fixtures and prediction markets a fresh deployment starts with.

Run with: python -m gamewallet.scripts.seed_catalog
"""

import asyncio
from datetime import timedelta
from decimal import Decimal

from sqlalchemy import select

from gamewallet.core.clock import utcnow
from gamewallet.db.session import AsyncSessionLocal
from gamewallet.models.casino import CasinoGame
from gamewallet.models.lottery import LotteryDraw
from gamewallet.models.match import SportsMatch
from gamewallet.models.prediction import PredictionMarket, PredictionOption
from gamewallet.models.staking import StakingPool, VestingPlan

STAKING_POOLS = [
    {
        "name": "Bitcoin Staking Pool",
        "asset": "BTC",
        "apy": Decimal("6.8"),
        "min_stake": Decimal("0.001"),
        "lock_period_days": 30,
        "reward_frequency": "daily",
        "early_unstake_penalty": Decimal("1.5"),
        "risk_level": "low",
        "description": "Stake BTC for a 30 day lock with daily rewards",
    },
    {
        "name": "Ethereum 2.0 Staking",
        "asset": "ETH",
        "apy": Decimal("8.2"),
        "min_stake": Decimal("0.01"),
        "lock_period_days": 60,
        "reward_frequency": "daily",
        "early_unstake_penalty": Decimal("2"),
        "risk_level": "low",
        "description": "Stake ETH for a 60 day lock with daily rewards",
    },
    {
        "name": "VEST Flexible Pool",
        "asset": "VEST",
        "apy": Decimal("12"),
        "min_stake": Decimal("10"),
        "lock_period_days": 0,
        "reward_frequency": "weekly",
        "early_unstake_penalty": Decimal("0"),
        "risk_level": "medium",
        "description": "Open-ended VEST staking, withdraw any time",
    },
]

VESTING_PLANS = [
    {
        "name": "Crypto Starter",
        "description": "Perfect for beginners looking to start their crypto investment journey",
        "min_investment": Decimal("100"),
        "max_investment": Decimal("5000"),
        "duration_days": 90,
        "apy": Decimal("8.5"),
        "compounding_frequency": "monthly",
        "early_withdrawal_penalty": Decimal("2"),
        "supported_assets": ["BTC", "ETH", "VEST"],
        "risk_level": "low",
    },
    {
        "name": "Growth Accelerator",
        "description": "Balanced growth plan with weekly compounding",
        "min_investment": Decimal("1000"),
        "max_investment": Decimal("25000"),
        "duration_days": 180,
        "apy": Decimal("12.8"),
        "compounding_frequency": "weekly",
        "early_withdrawal_penalty": Decimal("3"),
        "supported_assets": ["BTC", "ETH", "VEST"],
        "risk_level": "medium",
    },
    {
        "name": "Premium Vault",
        "description": "Maximum returns for long-term holders",
        "min_investment": Decimal("5000"),
        "max_investment": Decimal("100000"),
        "duration_days": 365,
        "apy": Decimal("18.5"),
        "compounding_frequency": "daily",
        "early_withdrawal_penalty": Decimal("5"),
        "supported_assets": ["BTC", "ETH"],
        "risk_level": "high",
    },
]

CASINO_GAMES = [
    {"code": "dice", "name": "Lucky Dice", "description": "Roll dice and predict the outcome",
     "min_bet": Decimal("0.0001"), "max_bet": Decimal("0.1")},
    {"code": "spin_wheel", "name": "Spin the Bottle", "description": "Spin and win based on result",
     "min_bet": Decimal("0.0005"), "max_bet": Decimal("0.5")},
    {"code": "roulette", "name": "Crypto Roulette", "description": "Classic roulette with crypto",
     "min_bet": Decimal("0.001"), "max_bet": Decimal("1")},
    {"code": "slots", "name": "Fruit Slots", "description": "Match 3 symbols to win",
     "min_bet": Decimal("0.0005"), "max_bet": Decimal("0.5")},
]


async def seed_staking_pools(session):
    """Create staking pools that do not exist yet"""
    created = 0
    for data in STAKING_POOLS:
        result = await session.execute(select(StakingPool).where(StakingPool.name == data["name"]))
        if result.scalar_one_or_none():
            print(f"Staking pool already exists: {data['name']}")
            continue
        session.add(StakingPool(**data))
        created += 1
    await session.commit()
    print(f"Created {created} staking pools")
    return created


async def seed_vesting_plans(session):
    """Create vesting plans that do not exist yet"""
    created = 0
    for data in VESTING_PLANS:
        result = await session.execute(select(VestingPlan).where(VestingPlan.name == data["name"]))
        if result.scalar_one_or_none():
            print(f"Vesting plan already exists: {data['name']}")
            continue
        session.add(VestingPlan(**data))
        created += 1
    await session.commit()
    print(f"Created {created} vesting plans")
    return created


async def seed_lottery_draws(session, now=None):
    """Create the daily, weekly and instant draws"""
    now = now or utcnow()
    draws = [
        {
            "name": "Daily Draw",
            "draw_type": "daily",
            "ticket_price": Decimal("0.0001"),
            "currency": "BTC",
            "max_numbers": 6,
            "number_range": 49,
            "draw_date": now + timedelta(days=1),
            "prize_pool": Decimal("0.005"),
            "prize_table": {"3": "2", "4": "10", "5": "50", "6": "500"},
        },
        {
            "name": "Weekly Mega",
            "draw_type": "weekly",
            "ticket_price": Decimal("0.001"),
            "currency": "BTC",
            "max_numbers": 7,
            "number_range": 59,
            "draw_date": now + timedelta(days=7),
            "prize_pool": Decimal("0.1"),
            "prize_table": {"4": "3", "5": "10", "6": "50", "7": "100"},
        },
        {
            "name": "Instant Win",
            "draw_type": "instant",
            "ticket_price": Decimal("50"),
            "currency": "VEST",
            "max_numbers": 3,
            "number_range": 20,
            "draw_date": None,
            "prize_pool": Decimal("1000"),
            "prize_table": {"3": "20"},
        },
    ]

    created = 0
    for data in draws:
        result = await session.execute(
            select(LotteryDraw).where(LotteryDraw.name == data["name"], LotteryDraw.status == "active")
        )
        if result.scalar_one_or_none():
            print(f"Active draw already exists: {data['name']}")
            continue
        session.add(LotteryDraw(sold_tickets=0, status="active", **data))
        created += 1
    await session.commit()
    print(f"Created {created} lottery draws")
    return created


async def seed_casino_games(session):
    """Create casino tables with their house limits"""
    created = 0
    for data in CASINO_GAMES:
        existing = await session.get(CasinoGame, data["code"])
        if existing:
            print(f"Casino game already exists: {data['code']}")
            continue
        session.add(CasinoGame(is_active=True, **data))
        created += 1
    await session.commit()
    print(f"Created {created} casino games")
    return created


async def seed_matches(session, now=None):
    """Create sample fixtures across sports"""
    now = now or utcnow()
    matches = [
        {"sport": "football", "league": "NFL", "home_team": "Kansas City Chiefs", "away_team": "Buffalo Bills",
         "start_time": now + timedelta(hours=2), "status": "upcoming",
         "odds_home_win": Decimal("1.85"), "odds_away_win": Decimal("2.10")},
        {"sport": "basketball", "league": "NBA", "home_team": "Los Angeles Lakers", "away_team": "Golden State Warriors",
         "start_time": now - timedelta(minutes=30), "status": "live",
         "odds_home_win": Decimal("2.25"), "odds_away_win": Decimal("1.75")},
        {"sport": "soccer", "league": "Premier League", "home_team": "Manchester City", "away_team": "Liverpool",
         "start_time": now + timedelta(days=1), "status": "upcoming",
         "odds_home_win": Decimal("2.40"), "odds_away_win": Decimal("2.80"), "odds_draw": Decimal("3.20")},
        {"sport": "tennis", "league": "ATP", "home_team": "Novak Djokovic", "away_team": "Rafael Nadal",
         "start_time": now + timedelta(days=2), "status": "upcoming",
         "odds_home_win": Decimal("1.95"), "odds_away_win": Decimal("1.90")},
        {"sport": "cricket", "league": "IPL", "home_team": "Mumbai Indians", "away_team": "Chennai Super Kings",
         "start_time": now + timedelta(days=3), "status": "upcoming",
         "odds_home_win": Decimal("1.80"), "odds_away_win": Decimal("2.05")},
    ]

    created = 0
    for data in matches:
        result = await session.execute(
            select(SportsMatch).where(
                SportsMatch.home_team == data["home_team"],
                SportsMatch.away_team == data["away_team"],
                SportsMatch.status.in_(["upcoming", "live"]),
            )
        )
        if result.scalar_one_or_none():
            print(f"Match already scheduled: {data['home_team']} vs {data['away_team']}")
            continue
        session.add(SportsMatch(total_bets=0, **data))
        created += 1
    await session.commit()
    print(f"Created {created} matches")
    return created


async def seed_prediction_markets(session, now=None):
    """Create sample prediction markets with their options"""
    now = now or utcnow()
    markets = [
        {
            "title": "Will BTC close above $100,000 this month?",
            "category": "crypto",
            "end_date": now + timedelta(days=30),
            "options": [("Yes", Decimal("2.10")), ("No", Decimal("1.75"))],
        },
        {
            "title": "Who wins the Premier League title?",
            "category": "sports",
            "end_date": now + timedelta(days=120),
            "options": [
                ("Manchester City", Decimal("2.50")),
                ("Liverpool", Decimal("3.00")),
                ("Arsenal", Decimal("4.00")),
            ],
        },
    ]

    created = 0
    for data in markets:
        result = await session.execute(
            select(PredictionMarket).where(PredictionMarket.title == data["title"])
        )
        if result.scalar_one_or_none():
            print(f"Market already exists: {data['title']}")
            continue
        market = PredictionMarket(
            title=data["title"],
            category=data["category"],
            end_date=data["end_date"],
            resolve_date=data["end_date"] + timedelta(days=1),
            status="active",
            total_pool=Decimal("0"),
        )
        session.add(market)
        await session.flush()
        for text, odds in data["options"]:
            session.add(PredictionOption(
                market_id=market.id, text=text, odds=odds, total_bets=Decimal("0"), backers=0
            ))
        created += 1
    await session.commit()
    print(f"Created {created} prediction markets")
    return created


async def seed_catalog(session, now=None):
    """Seed every catalog table; safe to run more than once"""
    return {
        "staking_pools": await seed_staking_pools(session),
        "vesting_plans": await seed_vesting_plans(session),
        "lottery_draws": await seed_lottery_draws(session, now),
        "casino_games": await seed_casino_games(session),
        "matches": await seed_matches(session, now),
        "prediction_markets": await seed_prediction_markets(session, now),
    }


async def main():
    print("Seeding game catalog...")
    async with AsyncSessionLocal() as session:
        try:
            summary = await seed_catalog(session)
        except Exception as e:
            print(f"Error seeding catalog: {e}")
            await session.rollback()
            raise
    print(f"Catalog seeding completed: {summary}")


if __name__ == "__main__":
    asyncio.run(main())
