"""
Read access to casino games and prediction markets
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gamewallet.core.exceptions import NotFound
from gamewallet.models.casino import CasinoGame
from gamewallet.models.prediction import PredictionMarket


async def get_casino_games(session: AsyncSession, active_only: bool = True) -> List[CasinoGame]:
    query = select(CasinoGame).order_by(CasinoGame.code)
    if active_only:
        query = query.where(CasinoGame.is_active.is_(True))
    result = await session.execute(query)
    return list(result.scalars().all())


async def get_casino_game(session: AsyncSession, code: str) -> CasinoGame:
    result = await session.execute(select(CasinoGame).where(CasinoGame.code == code))
    game = result.scalar_one_or_none()
    if not game or not game.is_active:
        raise NotFound("Casino game", code)
    return game


async def get_markets(
    session: AsyncSession,
    status: Optional[str] = None,
    category: Optional[str] = None,
    limit: int = 50,
    offset: int = 0
) -> List[PredictionMarket]:
    query = select(PredictionMarket).order_by(PredictionMarket.end_date.asc())
    if status:
        query = query.where(PredictionMarket.status == status)
    if category:
        query = query.where(PredictionMarket.category == category)
    result = await session.execute(query.limit(limit).offset(offset))
    return list(result.scalars().all())


async def get_market_by_id(session: AsyncSession, market_id: str, for_update: bool = False) -> PredictionMarket:
    query = select(PredictionMarket).where(PredictionMarket.id == market_id)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    market = result.scalar_one_or_none()
    if not market:
        raise NotFound("Market", market_id)
    return market
