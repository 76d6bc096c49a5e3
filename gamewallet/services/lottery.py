"""
Lottery ticket sales and draws.

Instant draws resolve inside the purchase; scheduled draws (daily, weekly,
special) stay pending until ``run_draw`` matches every ticket against the
winning numbers and pays the draw's prize table.
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from gamewallet.core.clock import as_utc, utcnow
from gamewallet.core.config import settings
from gamewallet.core.exceptions import AlreadySettled, DrawClosed, InvalidAmount, InvalidSelection
from gamewallet.core.money import quantize, validate_currency
from gamewallet.core.randomizer import Randomizer
from gamewallet.models.bet import Bet
from gamewallet.models.enums import BetOutcome, BetStatus, DrawStatus, DrawType, GameType, TicketStatus
from gamewallet.models.lottery import LotteryDraw, LotteryTicket
from gamewallet.repos.bet_repo import get_bet_by_id
from gamewallet.repos.lottery_repo import get_draw_by_id, get_pending_tickets
from gamewallet.schemas.bet_details import LotteryDetails
from gamewallet.services import bet_engine

# Configure logging
logger = logging.getLogger(__name__)


def validate_numbers(draw: LotteryDraw, numbers: Iterable[Any]) -> List[int]:
    """
    Check a pick against the draw rules and return it sorted.

    Raises:
        InvalidSelection: wrong count, duplicates, or a number outside 1..range
    """
    try:
        picked = list(numbers)
    except TypeError:
        raise InvalidSelection("Numbers must be a list")

    if any(isinstance(n, bool) or not isinstance(n, int) for n in picked):
        raise InvalidSelection("Numbers must be integers")
    if len(picked) != draw.max_numbers:
        raise InvalidSelection(f"Please select {draw.max_numbers} numbers")
    if len(set(picked)) != len(picked):
        raise InvalidSelection("Numbers must be unique")
    out_of_range = [n for n in picked if n < 1 or n > draw.number_range]
    if out_of_range:
        raise InvalidSelection(f"Numbers must be between 1 and {draw.number_range}")
    return sorted(picked)


def draw_odds(draw: LotteryDraw) -> Decimal:
    """Best multiplier a ticket on this draw can earn."""
    if draw.draw_type == DrawType.INSTANT.value:
        return Decimal(settings.instant_win_multiplier)
    return max(draw.top_multiplier, Decimal("1"))


def _check_on_sale(draw: LotteryDraw, quantity: int, now: datetime) -> None:
    if draw.status != DrawStatus.ACTIVE.value:
        raise DrawClosed(f"{draw.name} is {draw.status}")
    if draw.draw_type != DrawType.INSTANT.value and draw.draw_date and as_utc(draw.draw_date) <= now:
        raise DrawClosed(f"{draw.name} is no longer selling tickets")
    if draw.max_tickets is not None and (draw.sold_tickets or 0) + quantity > draw.max_tickets:
        raise DrawClosed(f"{draw.name} is sold out")


async def purchase_ticket(
    session: AsyncSession,
    randomizer: Randomizer,
    user_id: str,
    draw_id: str,
    numbers: Iterable[Any],
    quantity: int = 1,
    currency: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[LotteryTicket, Bet]:
    """
    Buy ``quantity`` tickets with one set of numbers.

    Every rule is checked before the wallet is touched. Instant tickets are
    drawn straight away and come back completed.

    Raises:
        InvalidSelection: bad numbers or a currency other than the draw's
        InvalidAmount: quantity below 1
        DrawClosed: draw not active, past its draw date, or sold out
        InsufficientFunds: wallet cannot cover price * quantity
    """
    now = now or utcnow()
    draw = await get_draw_by_id(session, draw_id, for_update=True)

    picked = validate_numbers(draw, numbers)
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidAmount("Quantity must be at least 1", quantity=quantity)
    if currency is not None and validate_currency(currency) != draw.currency:
        raise InvalidSelection(f"{draw.name} tickets are sold in {draw.currency}")
    _check_on_sale(draw, quantity, now)

    total_cost = quantize(draw.ticket_price * quantity)
    ticket_id = uuid.uuid4().hex
    details = LotteryDetails(
        draw_id=draw.id,
        ticket_id=ticket_id,
        draw_type=draw.draw_type,
        numbers=picked,
        quantity=quantity,
    )

    bet = await bet_engine.place_bet(
        session,
        user_id,
        GameType.LOTTERY,
        draw.id,
        total_cost,
        draw.currency,
        draw_odds(draw),
        details=details,
        now=now,
    )

    ticket = LotteryTicket(
        id=ticket_id,
        user_id=user_id,
        draw_id=draw.id,
        bet_id=bet.id,
        numbers=picked,
        quantity=quantity,
        total_cost=total_cost,
        currency=draw.currency,
        status=TicketStatus.PENDING.value,
        is_winner=False,
        purchased_at=now,
    )
    session.add(ticket)

    draw.sold_tickets = (draw.sold_tickets or 0) + quantity
    draw.prize_pool = (draw.prize_pool or Decimal("0")) + total_cost

    if draw.draw_type == DrawType.INSTANT.value:
        randomizer.next_round()
        won = randomizer.random() < settings.instant_win_probability
        await bet_engine.settle(session, bet, BetOutcome.WON if won else BetOutcome.LOST, now=now)
        ticket.status = TicketStatus.COMPLETED.value
        ticket.is_winner = won
        ticket.prize_amount = bet.payout
        logger.info(f"Instant ticket {ticket.id} for user {user_id}: {'win' if won else 'no win'}")

    await session.flush()
    logger.info(f"User {user_id} bought {quantity} ticket(s) for draw {draw.id} at {total_cost} {draw.currency}")
    return ticket, bet


async def close_draw(session: AsyncSession, draw_id: str) -> LotteryDraw:
    """Stop ticket sales; closing a closed draw is a no-op."""
    draw = await get_draw_by_id(session, draw_id, for_update=True)
    if draw.status == DrawStatus.DRAWN.value:
        raise AlreadySettled(f"Draw {draw.id} has already been drawn")
    if draw.status == DrawStatus.ACTIVE.value:
        draw.status = DrawStatus.CLOSED.value
        await session.flush()
        logger.info(f"Closed draw {draw.id}")
    return draw


def generate_winning_numbers(randomizer: Randomizer, draw: LotteryDraw) -> List[int]:
    randomizer.next_round()
    return sorted(randomizer.sample(range(1, draw.number_range + 1), draw.max_numbers))


async def pending_ticket_owners(session: AsyncSession, draw_id: str) -> List[str]:
    tickets = await get_pending_tickets(session, draw_id)
    return sorted({t.user_id for t in tickets})


async def run_draw(
    session: AsyncSession,
    randomizer: Randomizer,
    draw_id: str,
    winning_numbers: Optional[Iterable[Any]] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Draw the winning numbers and settle every pending ticket.

    A ticket wins when its matched count has a multiplier of at least 1 in
    the draw's prize table; it is paid ``total_cost * multiplier``.

    Raises:
        AlreadySettled: the draw was drawn before
        InvalidSelection: instant draw, or supplied numbers break the draw rules
    """
    now = now or utcnow()
    draw = await get_draw_by_id(session, draw_id, for_update=True)

    if draw.status == DrawStatus.DRAWN.value:
        raise AlreadySettled(f"Draw {draw.id} has already been drawn")
    if draw.draw_type == DrawType.INSTANT.value:
        raise InvalidSelection("Instant draws are resolved at purchase")

    if winning_numbers is None:
        winning = generate_winning_numbers(randomizer, draw)
    else:
        winning = validate_numbers(draw, winning_numbers)

    draw.status = DrawStatus.DRAWN.value
    draw.winning_numbers = winning
    multipliers = draw.prize_multipliers
    winning_set = set(winning)

    winners = 0
    total_paid = Decimal("0")
    tickets = await get_pending_tickets(session, draw.id)
    for ticket in tickets:
        matched = len(winning_set.intersection(ticket.numbers))
        multiplier = multipliers.get(matched, Decimal("0"))
        bet = await get_bet_by_id(session, ticket.bet_id, for_update=True)

        if bet.status == BetStatus.PENDING.value:
            if multiplier >= 1:
                await bet_engine.settle(session, bet, BetOutcome.WON, payout_odds=multiplier, now=now)
            else:
                await bet_engine.settle(session, bet, BetOutcome.LOST, now=now)

        bet.details = {**(bet.details or {}), "matched_count": matched}
        ticket.matched_count = matched
        ticket.is_winner = bet.status == BetStatus.WON.value
        ticket.prize_amount = bet.payout if ticket.is_winner else Decimal("0")
        ticket.status = TicketStatus.COMPLETED.value
        if ticket.is_winner:
            winners += 1
            total_paid += ticket.prize_amount

    await session.flush()
    logger.info(f"Draw {draw.id} drawn {winning}: {len(tickets)} tickets, {winners} winners, paid {total_paid} {draw.currency}")
    return {
        "draw_id": draw.id,
        "winning_numbers": winning,
        "tickets": len(tickets),
        "winners": winners,
        "total_paid": str(total_paid),
    }
