"""
Lottery repository: draws and tickets
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gamewallet.core.exceptions import NotFound
from gamewallet.models.enums import DrawStatus, DrawType, TicketStatus
from gamewallet.models.lottery import LotteryDraw, LotteryTicket


async def get_draws(
    session: AsyncSession,
    status: Optional[str] = None,
    draw_type: Optional[str] = None,
    limit: int = 50,
    offset: int = 0
) -> List[LotteryDraw]:
    query = select(LotteryDraw).order_by(LotteryDraw.draw_date.asc())
    if status:
        query = query.where(LotteryDraw.status == status)
    if draw_type:
        query = query.where(LotteryDraw.draw_type == draw_type)
    result = await session.execute(query.limit(limit).offset(offset))
    return list(result.scalars().all())


async def get_draw_by_id(session: AsyncSession, draw_id: str, for_update: bool = False) -> LotteryDraw:
    query = select(LotteryDraw).where(LotteryDraw.id == draw_id)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    draw = result.scalar_one_or_none()
    if not draw:
        raise NotFound("Draw", draw_id)
    return draw


async def get_due_draws(session: AsyncSession, now: datetime) -> List[LotteryDraw]:
    """Scheduled draws still selling tickets after their draw date"""
    result = await session.execute(
        select(LotteryDraw).where(
            LotteryDraw.status == DrawStatus.ACTIVE.value,
            LotteryDraw.draw_type != DrawType.INSTANT.value,
            LotteryDraw.draw_date.is_not(None),
            LotteryDraw.draw_date <= now,
        )
    )
    return list(result.scalars().all())


async def get_pending_tickets(session: AsyncSession, draw_id: str) -> List[LotteryTicket]:
    result = await session.execute(
        select(LotteryTicket)
        .where(
            LotteryTicket.draw_id == draw_id,
            LotteryTicket.status == TicketStatus.PENDING.value,
        )
        .order_by(LotteryTicket.purchased_at)
    )
    return list(result.scalars().all())


async def get_tickets_by_user(
    session: AsyncSession,
    user_id: str,
    draw_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0
) -> List[LotteryTicket]:
    query = select(LotteryTicket).where(LotteryTicket.user_id == user_id)
    if draw_id:
        query = query.where(LotteryTicket.draw_id == draw_id)
    query = query.order_by(LotteryTicket.purchased_at.desc()).limit(limit).offset(offset)
    result = await session.execute(query)
    return list(result.scalars().all())
