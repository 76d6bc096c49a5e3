"""
Operator endpoints: settlement triggers and maintenance.

Match results, draw execution and market resolution arrive here from the
operators (or the external feeds acting on their behalf).
"""

import logging

from fastapi import APIRouter, Depends

from gamewallet.api.deps import get_gaming_service
from gamewallet.api.v1.bets import bet_response
from gamewallet.core.auth import get_current_admin_id
from gamewallet.schemas.requests import DrawRequest, MatchResultRequest, ResolveRequest, SettleRequest
from gamewallet.services.gaming import GamingService

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/bets/{bet_id}/settle")
async def settle_bet(
    bet_id: str,
    request: SettleRequest,
    admin_id: str = Depends(get_current_admin_id),
    service: GamingService = Depends(get_gaming_service),
):
    logger.info(f"Admin {admin_id} settling bet {bet_id} as {request.outcome}")
    bet = await service.settle_bet(bet_id, request.outcome, payout_odds=request.payout_odds)
    return bet_response(bet)


@router.post("/bets/{bet_id}/cancel")
async def cancel_bet(
    bet_id: str,
    admin_id: str = Depends(get_current_admin_id),
    service: GamingService = Depends(get_gaming_service),
):
    logger.info(f"Admin {admin_id} cancelling bet {bet_id}")
    bet = await service.cancel_bet(bet_id)
    return bet_response(bet)


@router.post("/matches/{match_id}/finish")
async def finish_match(
    match_id: str,
    request: MatchResultRequest,
    admin_id: str = Depends(get_current_admin_id),
    service: GamingService = Depends(get_gaming_service),
):
    logger.info(f"Admin {admin_id} finishing match {match_id} with {request.result}")
    return await service.finish_match(
        match_id, request.result, home_score=request.home_score, away_score=request.away_score
    )


@router.post("/matches/{match_id}/cancel")
async def cancel_match(
    match_id: str,
    admin_id: str = Depends(get_current_admin_id),
    service: GamingService = Depends(get_gaming_service),
):
    logger.info(f"Admin {admin_id} cancelling match {match_id}")
    return await service.cancel_match(match_id)


@router.post("/draws/{draw_id}/close")
async def close_draw(
    draw_id: str,
    admin_id: str = Depends(get_current_admin_id),
    service: GamingService = Depends(get_gaming_service),
):
    draw = await service.close_draw(draw_id)
    return draw.to_dict()


@router.post("/draws/{draw_id}/run")
async def run_draw(
    draw_id: str,
    request: DrawRequest,
    admin_id: str = Depends(get_current_admin_id),
    service: GamingService = Depends(get_gaming_service),
):
    logger.info(f"Admin {admin_id} running draw {draw_id}")
    return await service.run_draw(draw_id, winning_numbers=request.winning_numbers)


@router.post("/markets/{market_id}/resolve")
async def resolve_market(
    market_id: str,
    request: ResolveRequest,
    admin_id: str = Depends(get_current_admin_id),
    service: GamingService = Depends(get_gaming_service),
):
    logger.info(f"Admin {admin_id} resolving market {market_id} on {request.winning_option_id}")
    return await service.resolve_market(market_id, request.winning_option_id)


@router.post("/positions/mature")
async def mature_positions(
    admin_id: str = Depends(get_current_admin_id),
    service: GamingService = Depends(get_gaming_service),
):
    return await service.mature_due_positions()
