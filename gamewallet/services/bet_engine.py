"""
Game-agnostic bet lifecycle: place, settle, cancel.

Every game module goes through these three functions so the ledger sees
exactly one debit per wager and at most one credit per settlement.
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from gamewallet.core.clock import utcnow
from gamewallet.core.exceptions import AlreadySettled, InvalidAmount
from gamewallet.core.metrics import BETS_CANCELLED, BETS_PLACED, BETS_SETTLED
from gamewallet.core.money import quantize, validate_amount, validate_currency, validate_odds
from gamewallet.models.bet import Bet, BetLeg
from gamewallet.models.enums import BetOutcome, BetStatus, GameType, LedgerPurpose
from gamewallet.repos.bet_repo import get_bet_by_id
from gamewallet.repos.wallet_repo import credit, debit, record_loss
from gamewallet.schemas.bet_details import dump_details

# Configure logging
logger = logging.getLogger(__name__)


async def place_bet(
    session: AsyncSession,
    user_id: str,
    game_type: GameType,
    game_id: str,
    amount: Any,
    currency: str,
    odds: Any,
    details=None,
    legs: Optional[List[BetLeg]] = None,
    now: Optional[datetime] = None,
) -> Bet:
    """
    Debit the stake and record a pending bet.

    Args:
        session: Database session
        user_id: Bettor
        game_type: Game the bet belongs to
        game_id: Draw, match, casino game or market id
        amount: Stake, strictly positive
        currency: Wallet currency of the stake
        odds: Payout multiplier on a win, at least 1
        details: Game-specific payload (one of the ``BetDetails`` variants)
        legs: Sports legs, empty for every other game

    Returns:
        The pending Bet

    Raises:
        InvalidAmount: amount <= 0 or odds < 1
        InsufficientFunds: the wallet cannot cover the stake
    """
    amount = validate_amount(amount)
    odds = validate_odds(odds)
    currency = validate_currency(currency)
    game_type = GameType(game_type)
    now = now or utcnow()

    bet = Bet(
        id=uuid.uuid4(),
        user_id=user_id,
        game_type=game_type.value,
        game_id=str(game_id),
        amount=amount,
        currency=currency,
        odds=odds,
        status=BetStatus.PENDING.value,
        details=dump_details(details) if details is not None else None,
        placed_at=now,
        legs=legs or [],
    )

    # Debit first; a rejected debit leaves nothing to clean up
    await debit(
        session,
        user_id,
        currency,
        amount,
        purpose=LedgerPurpose.WAGER,
        now=now,
        related_entity="bet",
        related_id=str(bet.id),
        description=f"{game_type.value} bet on {game_id}",
    )

    session.add(bet)
    await session.flush()

    BETS_PLACED.labels(game_type=game_type.value, currency=currency).inc()
    logger.info(f"Placed {game_type.value} bet {bet.id} for user {user_id}: {amount} {currency} @ {odds}")
    return bet


async def settle(
    session: AsyncSession,
    bet: Bet,
    outcome: BetOutcome,
    payout_odds: Any = None,
    now: Optional[datetime] = None,
) -> Bet:
    """
    Settle a loaded bet.

    ``payout_odds`` lets games whose multiplier is only known at resolution
    (lottery prize tiers) pay less than the odds fixed at placement; it must
    stay within ``[1, bet.odds]``.
    """
    if bet.status != BetStatus.PENDING.value:
        logger.warning(f"Bet {bet.id} already {bet.status}, refusing to settle again")
        raise AlreadySettled(f"Bet {bet.id} is already {bet.status}")

    outcome = BetOutcome(outcome)
    now = now or utcnow()

    if outcome == BetOutcome.WON:
        multiplier = bet.odds if payout_odds is None else validate_odds(payout_odds)
        if multiplier > bet.odds:
            raise InvalidAmount(
                f"Payout odds {multiplier} exceed bet odds {bet.odds}",
                bet_id=str(bet.id),
            )
        payout = quantize(bet.amount * multiplier)
        await credit(
            session,
            bet.user_id,
            bet.currency,
            payout,
            purpose=LedgerPurpose.WIN,
            now=now,
            related_entity="bet",
            related_id=str(bet.id),
            description=f"{bet.game_type} win on {bet.game_id}",
        )
        bet.status = BetStatus.WON.value
        bet.payout = payout
    else:
        await record_loss(session, bet.user_id, bet.amount, now=now)
        bet.status = BetStatus.LOST.value
        bet.payout = Decimal("0")

    bet.settled_at = now
    await session.flush()

    BETS_SETTLED.labels(game_type=bet.game_type, outcome=outcome.value).inc()
    logger.info(f"Settled bet {bet.id} as {outcome.value}, payout {bet.payout} {bet.currency}")
    return bet


async def settle_bet(
    session: AsyncSession,
    bet_id,
    outcome: BetOutcome,
    payout_odds: Any = None,
    now: Optional[datetime] = None,
) -> Bet:
    """
    Settle a pending bet by id.

    Raises:
        NotFound: unknown bet
        AlreadySettled: bet is no longer pending
    """
    bet = await get_bet_by_id(session, bet_id, for_update=True)
    return await settle(session, bet, outcome, payout_odds=payout_odds, now=now)


async def cancel(session: AsyncSession, bet: Bet, now: Optional[datetime] = None) -> Bet:
    """Refund the full stake of a pending bet."""
    if bet.status != BetStatus.PENDING.value:
        raise AlreadySettled(f"Bet {bet.id} is already {bet.status}")

    now = now or utcnow()
    await credit(
        session,
        bet.user_id,
        bet.currency,
        bet.amount,
        purpose=LedgerPurpose.REFUND,
        now=now,
        related_entity="bet",
        related_id=str(bet.id),
        description=f"Refund of {bet.game_type} bet on {bet.game_id}",
    )
    bet.status = BetStatus.CANCELLED.value
    bet.settled_at = now
    await session.flush()

    BETS_CANCELLED.labels(game_type=bet.game_type).inc()
    logger.info(f"Cancelled bet {bet.id}, refunded {bet.amount} {bet.currency}")
    return bet


async def cancel_bet(session: AsyncSession, bet_id, now: Optional[datetime] = None) -> Bet:
    bet = await get_bet_by_id(session, bet_id, for_update=True)
    return await cancel(session, bet, now=now)
