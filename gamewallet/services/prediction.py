"""
Prediction markets: fixed-odds bets on an option, settled when the market resolves
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from gamewallet.core.clock import as_utc, utcnow
from gamewallet.core.exceptions import AlreadySettled, InvalidSelection, MarketClosed
from gamewallet.models.bet import Bet
from gamewallet.models.enums import BetOutcome, GameType, MarketStatus
from gamewallet.repos.bet_repo import get_pending_bets_for_game
from gamewallet.repos.catalog_repo import get_market_by_id
from gamewallet.schemas.bet_details import PredictionDetails
from gamewallet.services import bet_engine

# Configure logging
logger = logging.getLogger(__name__)


async def place_prediction_bet(
    session: AsyncSession,
    user_id: str,
    market_id: str,
    option_id: str,
    amount: Any,
    currency: str,
    now: Optional[datetime] = None,
) -> Bet:
    """
    Back one option of an open market at its current odds.

    Raises:
        MarketClosed: market not active or past its end date
        InvalidSelection: option does not belong to the market
    """
    now = now or utcnow()
    market = await get_market_by_id(session, market_id, for_update=True)
    if market.status != MarketStatus.ACTIVE.value or as_utc(market.end_date) <= now:
        raise MarketClosed(f"Market '{market.title}' is closed")

    option = market.option(option_id)
    if option is None:
        raise InvalidSelection(f"Option {option_id} is not part of market {market.id}")

    bet = await bet_engine.place_bet(
        session,
        user_id,
        GameType.PREDICTION,
        market.id,
        amount,
        currency,
        option.odds,
        details=PredictionDetails(market_id=market.id, option_id=option.id, option_text=option.text),
        now=now,
    )

    option.total_bets = (option.total_bets or Decimal("0")) + bet.amount
    option.backers = (option.backers or 0) + 1
    market.total_pool = (market.total_pool or Decimal("0")) + bet.amount
    return bet


async def affected_users(session: AsyncSession, market_id: str) -> List[str]:
    bets = await get_pending_bets_for_game(session, GameType.PREDICTION.value, market_id)
    return sorted({bet.user_id for bet in bets})


async def resolve_market(
    session: AsyncSession,
    market_id: str,
    winning_option_id: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Close the market on its winning option and settle every pending bet.

    Raises:
        AlreadySettled: market resolved before
        InvalidSelection: winning option not part of the market
    """
    now = now or utcnow()
    market = await get_market_by_id(session, market_id, for_update=True)
    if market.status == MarketStatus.RESOLVED.value:
        raise AlreadySettled(f"Market {market.id} is already resolved")
    if market.option(winning_option_id) is None:
        raise InvalidSelection(f"Option {winning_option_id} is not part of market {market.id}")

    market.status = MarketStatus.RESOLVED.value
    market.winning_option_id = winning_option_id
    market.resolve_date = now

    won = lost = 0
    for bet in await get_pending_bets_for_game(session, GameType.PREDICTION.value, market.id):
        if (bet.details or {}).get("option_id") == winning_option_id:
            await bet_engine.settle(session, bet, BetOutcome.WON, now=now)
            won += 1
        else:
            await bet_engine.settle(session, bet, BetOutcome.LOST, now=now)
            lost += 1

    await session.flush()
    logger.info(f"Resolved market {market.id} on option {winning_option_id}: {won} won, {lost} lost")
    return {"market_id": market.id, "winning_option_id": winning_option_id, "won": won, "lost": lost}
