"""
Bet history endpoints
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from gamewallet.api.deps import get_gaming_service
from gamewallet.core.auth import get_current_user_id
from gamewallet.core.exceptions import NotFound
from gamewallet.models.enums import BetStatus, GameType
from gamewallet.schemas.filters import BetFilter
from gamewallet.services.gaming import GamingService

router = APIRouter()


def bet_response(bet) -> dict:
    data = bet.to_dict()
    data["legs"] = [
        {"match_id": leg.match_id, "selection": leg.selection, "odds": str(leg.odds), "result": leg.result}
        for leg in bet.legs
    ]
    return data


@router.get("/bets")
async def list_bets(
    status: Optional[BetStatus] = None,
    game_type: Optional[GameType] = None,
    game_id: Optional[str] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    bet_filter = BetFilter(
        status=status, game_type=game_type, game_id=game_id,
        since=since, until=until, limit=limit, offset=offset,
    )
    bets = await service.list_bets(user_id, bet_filter)
    return {"bets": [bet_response(b) for b in bets]}


@router.get("/bets/stats")
async def gaming_stats(
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    return await service.gaming_stats(user_id)

@router.get("/bets/{bet_id}")
async def get_bet(
    bet_id: str,
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    bet = await service.get_bet(bet_id)
    if bet.user_id != user_id:
        raise NotFound("Bet", bet_id)
    return bet_response(bet)
