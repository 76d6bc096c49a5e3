"""
Match repository for sports matches
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gamewallet.core.exceptions import NotFound
from gamewallet.models.match import SportsMatch


async def get_matches(
    session: AsyncSession,
    limit: int = 50,
    offset: int = 0,
    status: Optional[str] = None,
    sport: Optional[str] = None
) -> List[SportsMatch]:
    """
    Get list of matches ordered by start time.

    Args:
        session: Database session
        limit: Maximum number of matches to return
        offset: Number of matches to skip
        status: Filter by match status
        sport: Filter by sport
    """
    query = select(SportsMatch).order_by(SportsMatch.start_time.asc())

    if status:
        query = query.where(SportsMatch.status == status)
    if sport:
        query = query.where(SportsMatch.sport == sport)

    query = query.limit(limit).offset(offset)

    result = await session.execute(query)
    return list(result.scalars().all())


async def get_match_by_id(session: AsyncSession, match_id: str, for_update: bool = False) -> SportsMatch:
    """
    Get match by ID.

    Raises:
        NotFound: unknown match
    """
    query = select(SportsMatch).where(SportsMatch.id == match_id)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    match = result.scalar_one_or_none()
    if not match:
        raise NotFound("Match", match_id)
    return match
