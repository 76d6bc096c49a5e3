"""
Bet repository
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gamewallet.core.exceptions import NotFound
from gamewallet.models.bet import Bet, BetLeg
from gamewallet.models.enums import BetStatus, LegResult
from gamewallet.schemas.filters import BetFilter


def _as_uuid(bet_id) -> Optional[UUID]:
    if isinstance(bet_id, UUID):
        return bet_id
    try:
        return UUID(str(bet_id))
    except ValueError:
        return None


async def get_bet_by_id(session: AsyncSession, bet_id, for_update: bool = False) -> Bet:
    """
    Get bet by ID.

    Raises:
        NotFound: unknown or malformed id
    """
    bet_uuid = _as_uuid(bet_id)
    if bet_uuid is None:
        raise NotFound("Bet", bet_id)

    query = select(Bet).where(Bet.id == bet_uuid)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    bet = result.scalar_one_or_none()
    if not bet:
        raise NotFound("Bet", bet_id)
    return bet


async def get_bet_owner(session: AsyncSession, bet_id) -> str:
    bet = await get_bet_by_id(session, bet_id)
    return bet.user_id


async def list_bets(session: AsyncSession, user_id: str, bet_filter: Optional[BetFilter] = None) -> List[Bet]:
    """
    Get bets for a user, newest first, filtered by status, game and time range.
    """
    bet_filter = bet_filter or BetFilter()
    query = select(Bet).where(Bet.user_id == user_id)

    if bet_filter.status:
        query = query.where(Bet.status == bet_filter.status.value)
    if bet_filter.game_type:
        query = query.where(Bet.game_type == bet_filter.game_type.value)
    if bet_filter.game_id:
        query = query.where(Bet.game_id == bet_filter.game_id)
    if bet_filter.since:
        query = query.where(Bet.placed_at >= bet_filter.since)
    if bet_filter.until:
        query = query.where(Bet.placed_at < bet_filter.until)

    query = query.order_by(desc(Bet.placed_at)).limit(bet_filter.limit).offset(bet_filter.offset)
    result = await session.execute(query)
    return list(result.scalars().all())


async def get_pending_bets_for_game(session: AsyncSession, game_type: str, game_id: str) -> List[Bet]:
    result = await session.execute(
        select(Bet)
        .where(
            Bet.game_type == game_type,
            Bet.game_id == game_id,
            Bet.status == BetStatus.PENDING.value,
        )
        .order_by(Bet.placed_at)
    )
    return list(result.scalars().all())


async def get_pending_legs_for_match(session: AsyncSession, match_id: str) -> List[BetLeg]:
    """Unresolved legs on a match with their bets and every sibling leg loaded"""
    result = await session.execute(
        select(BetLeg)
        .options(selectinload(BetLeg.bet).selectinload(Bet.legs))
        .join(Bet, Bet.id == BetLeg.bet_id)
        .where(
            BetLeg.match_id == match_id,
            BetLeg.result == LegResult.PENDING.value,
        )
        .order_by(Bet.placed_at)
    )
    return list(result.scalars().all())


async def get_bet_totals(session: AsyncSession, user_id: str) -> list:
    """Count, stake, payout and biggest payout per game type, currency and status"""
    result = await session.execute(
        select(
            Bet.game_type,
            Bet.currency,
            Bet.status,
            func.count(Bet.id).label("bets"),
            func.sum(Bet.amount).label("staked"),
            func.sum(Bet.payout).label("paid"),
            func.max(Bet.payout).label("biggest_payout"),
        )
        .where(Bet.user_id == user_id)
        .group_by(Bet.game_type, Bet.currency, Bet.status)
    )
    return list(result.all())


async def get_settled_statuses(session: AsyncSession, user_id: str) -> List[str]:
    """Won/lost statuses in settlement order, oldest first"""
    result = await session.execute(
        select(Bet.status)
        .where(
            Bet.user_id == user_id,
            Bet.status.in_([BetStatus.WON.value, BetStatus.LOST.value]),
        )
        .order_by(Bet.settled_at, Bet.placed_at)
    )
    return list(result.scalars().all())
