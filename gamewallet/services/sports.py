"""
Sports betting: singles, combos and match settlement
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from gamewallet.core.clock import utcnow
from gamewallet.core.config import settings
from gamewallet.core.exceptions import AlreadySettled, InvalidSelection, MatchClosed
from gamewallet.core.money import quantize
from gamewallet.models.bet import Bet, BetLeg
from gamewallet.models.enums import BetOutcome, BetStatus, GameType, LegResult, MatchSelection, MatchStatus
from gamewallet.models.match import SportsMatch
from gamewallet.repos.bet_repo import get_pending_legs_for_match
from gamewallet.repos.match_repo import get_match_by_id
from gamewallet.schemas.bet_details import SportsDetails, SportsLeg
from gamewallet.services import bet_engine

# Configure logging
logger = logging.getLogger(__name__)

CLOSED_MATCH_STATUSES = (MatchStatus.FINISHED.value, MatchStatus.CANCELLED.value)


def parse_selection(selection: Any) -> MatchSelection:
    try:
        return MatchSelection(selection)
    except ValueError:
        raise InvalidSelection(f"Unknown selection: {selection}")


def _quote(match: SportsMatch, selection: Any) -> Tuple[MatchSelection, Decimal]:
    """Odds offered on an open match for one selection."""
    if match.status in CLOSED_MATCH_STATUSES:
        raise MatchClosed(f"{match.title} is {match.status}")
    choice = parse_selection(selection)
    odds = match.odds_for(choice)
    if odds is None:
        raise InvalidSelection(f"{match.title} has no {choice.value} market")
    return choice, Decimal(odds)


async def place_single_bet(
    session: AsyncSession,
    user_id: str,
    match_id: str,
    selection: Any,
    amount: Any,
    currency: str,
    now: Optional[datetime] = None,
) -> Bet:
    """
    Bet on one match outcome at the currently published odds.

    Raises:
        MatchClosed: match finished or cancelled
        InvalidSelection: unknown selection, or draw on a match without draw odds
    """
    match = await get_match_by_id(session, match_id, for_update=True)
    choice, odds = _quote(match, selection)

    leg = BetLeg(position=0, match_id=match.id, selection=choice.value, odds=odds, result=LegResult.PENDING.value)
    details = SportsDetails(
        mode="single",
        legs=[SportsLeg(match_id=match.id, selection=choice.value, odds=odds)],
    )
    bet = await bet_engine.place_bet(
        session, user_id, GameType.SPORTS, match.id, amount, currency, odds,
        details=details, legs=[leg], now=now,
    )
    match.total_bets = (match.total_bets or 0) + 1
    return bet


async def place_combo_bet(
    session: AsyncSession,
    user_id: str,
    legs: Iterable[Any],
    amount: Any,
    currency: str,
    now: Optional[datetime] = None,
) -> Bet:
    """
    Bet on several matches at once; the odds are the product of the leg odds.

    ``legs`` is a sequence of ``(match_id, selection)`` pairs or mappings with
    those two keys.

    Raises:
        InvalidSelection: leg count outside the configured bounds, a repeated
            match, or an invalid selection
        MatchClosed: any match is finished or cancelled
    """
    requested = [_leg_pair(leg) for leg in legs]
    if not settings.combo_min_legs <= len(requested) <= settings.combo_max_legs:
        raise InvalidSelection(
            f"Combo bets need between {settings.combo_min_legs} and {settings.combo_max_legs} selections"
        )
    match_ids = [match_id for match_id, _ in requested]
    if len(set(match_ids)) != len(match_ids):
        raise InvalidSelection("A combo bet can include each match only once")

    bet_legs = []
    detail_legs = []
    combined = Decimal("1")
    matches = []
    for position, (match_id, selection) in enumerate(requested):
        match = await get_match_by_id(session, match_id, for_update=True)
        choice, odds = _quote(match, selection)
        combined *= odds
        matches.append(match)
        bet_legs.append(
            BetLeg(position=position, match_id=match.id, selection=choice.value, odds=odds,
                   result=LegResult.PENDING.value)
        )
        detail_legs.append(SportsLeg(match_id=match.id, selection=choice.value, odds=odds))

    bet = await bet_engine.place_bet(
        session, user_id, GameType.SPORTS, "combo", amount, currency, quantize(combined),
        details=SportsDetails(mode="combo", legs=detail_legs), legs=bet_legs, now=now,
    )
    for match in matches:
        match.total_bets = (match.total_bets or 0) + 1
    return bet


def _leg_pair(leg: Any) -> Tuple[str, Any]:
    if isinstance(leg, dict):
        if "match_id" not in leg or "selection" not in leg:
            raise InvalidSelection("Each leg needs a match_id and a selection")
        return str(leg["match_id"]), leg["selection"]
    if hasattr(leg, "match_id") and hasattr(leg, "selection"):
        return str(leg.match_id), leg.selection
    try:
        match_id, selection = leg
    except (TypeError, ValueError):
        raise InvalidSelection(f"Malformed leg: {leg!r}")
    return str(match_id), selection


async def _resolve_bet(session: AsyncSession, bet: Bet, now: datetime) -> Optional[BetOutcome]:
    """Settle a bet once its legs decide it; None while legs are still open."""
    results = [leg.result for leg in bet.legs]
    if LegResult.LOST.value in results:
        for leg in bet.legs:
            if leg.result == LegResult.PENDING.value:
                leg.result = LegResult.VOID.value
        await bet_engine.settle(session, bet, BetOutcome.LOST, now=now)
        return BetOutcome.LOST
    if results and all(r == LegResult.WON.value for r in results):
        await bet_engine.settle(session, bet, BetOutcome.WON, now=now)
        return BetOutcome.WON
    return None


async def affected_users(session: AsyncSession, match_id: str) -> List[str]:
    legs = await get_pending_legs_for_match(session, match_id)
    return sorted({leg.bet.user_id for leg in legs})


async def finish_match(
    session: AsyncSession,
    match_id: str,
    result: Any,
    home_score: Optional[int] = None,
    away_score: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Record the final result and resolve every pending leg on the match.

    Combos are all-or-nothing: one lost leg loses the bet at once, a win is
    paid only when the last leg has won.
    """
    now = now or utcnow()
    match = await get_match_by_id(session, match_id, for_update=True)
    if match.status in CLOSED_MATCH_STATUSES:
        raise AlreadySettled(f"{match.title} is already {match.status}")

    outcome = parse_selection(result)
    match.status = MatchStatus.FINISHED.value
    match.result = outcome.value
    match.home_score = home_score
    match.away_score = away_score

    won = lost = waiting = 0
    for leg in await get_pending_legs_for_match(session, match.id):
        leg.result = LegResult.WON.value if leg.selection == outcome.value else LegResult.LOST.value
        bet = leg.bet
        if bet.status != BetStatus.PENDING.value:
            continue
        settled = await _resolve_bet(session, bet, now)
        if settled == BetOutcome.WON:
            won += 1
        elif settled == BetOutcome.LOST:
            lost += 1
        else:
            waiting += 1

    await session.flush()
    logger.info(f"Finished match {match.id} ({outcome.value}): {won} won, {lost} lost, {waiting} awaiting other legs")
    return {"match_id": match.id, "result": outcome.value, "won": won, "lost": lost, "pending": waiting}


async def cancel_match(session: AsyncSession, match_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Cancel a match and refund every pending bet with a leg on it, combos included."""
    now = now or utcnow()
    match = await get_match_by_id(session, match_id, for_update=True)
    if match.status in CLOSED_MATCH_STATUSES:
        raise AlreadySettled(f"{match.title} is already {match.status}")

    match.status = MatchStatus.CANCELLED.value
    refunded = 0
    for leg in await get_pending_legs_for_match(session, match.id):
        bet = leg.bet
        for bet_leg in bet.legs:
            if bet_leg.result == LegResult.PENDING.value:
                bet_leg.result = LegResult.VOID.value
        if bet.status == BetStatus.PENDING.value:
            await bet_engine.cancel(session, bet, now=now)
            refunded += 1

    await session.flush()
    logger.info(f"Cancelled match {match.id}, refunded {refunded} bets")
    return {"match_id": match.id, "refunded": refunded}
