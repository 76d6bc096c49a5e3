"""
Game endpoints: lottery, sports, casino and prediction markets
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from gamewallet.api.deps import get_gaming_service
from gamewallet.api.v1.bets import bet_response
from gamewallet.core.auth import get_current_user_id
from gamewallet.schemas.requests import (
    CasinoRoundRequest,
    ComboBetRequest,
    PredictionBetRequest,
    SingleBetRequest,
    TicketRequest,
)
from gamewallet.services.gaming import GamingService

router = APIRouter()


# Lottery

@router.get("/lottery/draws")
async def list_draws(
    status: Optional[str] = None,
    draw_type: Optional[str] = None,
    service: GamingService = Depends(get_gaming_service),
):
    draws = await service.list_draws(status=status, draw_type=draw_type)
    return {"draws": [d.to_dict() for d in draws]}


@router.post("/lottery/draws/{draw_id}/tickets", status_code=201)
async def purchase_ticket(
    draw_id: str,
    request: TicketRequest,
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    """
    Buy tickets for a draw. Instant draws return the result straight away.
    """
    ticket, bet = await service.purchase_lottery_ticket(
        user_id, draw_id, request.numbers, quantity=request.quantity, currency=request.currency
    )
    return {"ticket": ticket.to_dict(), "bet": bet_response(bet)}


@router.get("/lottery/tickets")
async def list_tickets(
    draw_id: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    tickets = await service.list_tickets(user_id, draw_id=draw_id, limit=limit, offset=offset)
    return {"tickets": [t.to_dict() for t in tickets]}


# Sports

@router.get("/sports/matches")
async def list_matches(
    status: Optional[str] = None,
    sport: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    service: GamingService = Depends(get_gaming_service),
):
    matches = await service.list_matches(status=status, sport=sport, limit=limit, offset=offset)
    return {"matches": [m.to_dict() for m in matches]}


@router.post("/sports/bets", status_code=201)
async def place_single_bet(
    request: SingleBetRequest,
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    bet = await service.place_sports_bet(
        user_id, request.match_id, request.selection, request.amount, request.currency
    )
    return bet_response(bet)


@router.post("/sports/combos", status_code=201)
async def place_combo_bet(
    request: ComboBetRequest,
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    bet = await service.place_combo_bet(user_id, request.legs, request.amount, request.currency)
    return bet_response(bet)


# Casino

@router.get("/casino/games")
async def list_casino_games(service: GamingService = Depends(get_gaming_service)):
    games = await service.list_casino_games()
    return {"games": [g.to_dict() for g in games]}


@router.post("/casino/{game}/play")
async def play_casino_round(
    game: str,
    request: CasinoRoundRequest,
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    bet = await service.play_casino_round(
        user_id, game, request.amount, request.currency, selection=request.selection
    )
    return bet_response(bet)


# Prediction markets

@router.get("/prediction/markets")
async def list_markets(
    status: Optional[str] = None,
    category: Optional[str] = None,
    service: GamingService = Depends(get_gaming_service),
):
    markets = await service.list_markets(status=status, category=category)
    return {"markets": [m.to_dict() for m in markets]}


@router.post("/prediction/markets/{market_id}/bets", status_code=201)
async def place_prediction_bet(
    market_id: str,
    request: PredictionBetRequest,
    user_id: str = Depends(get_current_user_id),
    service: GamingService = Depends(get_gaming_service),
):
    bet = await service.place_prediction_bet(
        user_id, market_id, request.option_id, request.amount, request.currency
    )
    return bet_response(bet)
