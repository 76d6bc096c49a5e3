"""
Staking and vesting repository
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gamewallet.core.exceptions import NotFound
from gamewallet.models.enums import PositionKind, PositionStatus
from gamewallet.models.staking import StakingPool, StakingPosition, VestingPlan, VestingPosition
from gamewallet.schemas.filters import PositionFilter

POSITION_MODELS = {
    PositionKind.STAKING: StakingPosition,
    PositionKind.VESTING: VestingPosition,
}


async def get_pools(session: AsyncSession) -> List[StakingPool]:
    result = await session.execute(select(StakingPool).order_by(StakingPool.name))
    return list(result.scalars().all())


async def get_pool_by_id(session: AsyncSession, pool_id: str) -> StakingPool:
    result = await session.execute(select(StakingPool).where(StakingPool.id == pool_id))
    pool = result.scalar_one_or_none()
    if not pool:
        raise NotFound("Staking pool", pool_id)
    return pool


async def get_plans(session: AsyncSession) -> List[VestingPlan]:
    result = await session.execute(select(VestingPlan).order_by(VestingPlan.duration_days))
    return list(result.scalars().all())


async def get_plan_by_id(session: AsyncSession, plan_id: str) -> VestingPlan:
    result = await session.execute(select(VestingPlan).where(VestingPlan.id == plan_id))
    plan = result.scalar_one_or_none()
    if not plan:
        raise NotFound("Vesting plan", plan_id)
    return plan


async def find_position(session: AsyncSession, position_id: str, for_update: bool = False):
    """Look a position up in both tables; staking first."""
    for model in (StakingPosition, VestingPosition):
        query = select(model).where(model.id == position_id)
        if for_update:
            query = query.with_for_update()
        result = await session.execute(query)
        position = result.scalar_one_or_none()
        if position:
            return position
    raise NotFound("Position", position_id)


async def list_positions(
    session: AsyncSession,
    user_id: str,
    position_filter: Optional[PositionFilter] = None
) -> list:
    """
    Positions for a user across staking and vesting, newest first.

    Pagination applies to the merged list.
    """
    position_filter = position_filter or PositionFilter()
    kinds = [position_filter.kind] if position_filter.kind else list(POSITION_MODELS)
    window = position_filter.offset + position_filter.limit

    positions = []
    for kind in kinds:
        model = POSITION_MODELS[kind]
        query = select(model).where(model.user_id == user_id)
        if position_filter.status:
            query = query.where(model.status == position_filter.status.value)
        if position_filter.since:
            query = query.where(model.start_date >= position_filter.since)
        if position_filter.until:
            query = query.where(model.start_date < position_filter.until)
        query = query.order_by(model.start_date.desc()).limit(window)
        result = await session.execute(query)
        positions.extend(result.scalars().all())

    positions.sort(key=lambda p: p.start_date, reverse=True)
    return positions[position_filter.offset:window]


async def get_due_positions(session: AsyncSession, now: datetime) -> list:
    """Active positions whose lock period has ended"""
    due = []
    for model in POSITION_MODELS.values():
        result = await session.execute(
            select(model).where(
                model.status == PositionStatus.ACTIVE.value,
                model.end_date.is_not(None),
                model.end_date <= now,
            )
        )
        due.extend(result.scalars().all())
    return due


async def get_active_positions(session: AsyncSession, user_id: str) -> list:
    active = []
    for model in POSITION_MODELS.values():
        result = await session.execute(
            select(model).where(
                model.user_id == user_id,
                model.status == PositionStatus.ACTIVE.value,
            )
        )
        active.extend(result.scalars().all())
    return active
