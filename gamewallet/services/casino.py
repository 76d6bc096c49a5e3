"""
Round-based casino games.

The outcome math lives in plain functions (``dice_multiplier``,
``slots_multiplier``, ``roulette_multiplier``, ``segment_for_angle``) so a
recorded round can be replayed and audited without a database. ``play_round``
wires them to the bet engine: place, draw, settle, all in one transaction.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from gamewallet.core.clock import utcnow
from gamewallet.core.config import settings
from gamewallet.core.exceptions import AboveMaximum, BelowMinimum, InvalidSelection
from gamewallet.core.money import quantize, validate_amount
from gamewallet.core.randomizer import Randomizer
from gamewallet.models.bet import Bet
from gamewallet.models.enums import BetOutcome, CasinoGameCode, GameType
from gamewallet.repos.catalog_repo import get_casino_game
from gamewallet.schemas.bet_details import CasinoDetails
from gamewallet.services import bet_engine

# Configure logging
logger = logging.getLogger(__name__)

SLOT_SYMBOLS = ("apple", "orange", "lemon", "grape", "strawberry", "kiwi", "cherry", "diamond")
JACKPOT_SYMBOL = "diamond"

DICE_MIN_TARGET = 2
DICE_MAX_TARGET = 12

SpinRule = Callable[[str, str], Decimal]


# Dice

def dice_multiplier(target: int) -> Decimal:
    """
    Payout for "two dice sum to at least ``target``": 6 / (7 - target).

    Only targets below 7 give odds of at least 1; higher targets are refused.
    """
    if isinstance(target, bool) or not isinstance(target, int):
        raise InvalidSelection("Dice target must be an integer")
    if target < DICE_MIN_TARGET or target > DICE_MAX_TARGET:
        raise InvalidSelection(f"Dice target must be between {DICE_MIN_TARGET} and {DICE_MAX_TARGET}")
    if target >= 7:
        raise InvalidSelection("Dice targets of 7 or more are not offered")
    return quantize(Decimal(6) / Decimal(7 - target))


def roll_dice(randomizer: Randomizer) -> List[int]:
    return [randomizer.randint(1, 6), randomizer.randint(1, 6)]


# Slots

def slots_multiplier(reels: Sequence[str]) -> Decimal:
    """Three of a kind pays the triple (diamonds the jackpot), exactly two pays the pair."""
    distinct = len(set(reels))
    if distinct == 1:
        if reels[0] == JACKPOT_SYMBOL:
            return Decimal(settings.slots_jackpot_multiplier)
        return Decimal(settings.slots_triple_multiplier)
    if distinct == 2:
        return Decimal(settings.slots_pair_multiplier)
    return Decimal("0")


def spin_reels(randomizer: Randomizer) -> List[str]:
    return [randomizer.choice(SLOT_SYMBOLS) for _ in range(3)]


# Roulette

def validate_roulette_numbers(numbers: Any, wheel_range: Optional[int] = None) -> List[int]:
    wheel_range = settings.roulette_range if wheel_range is None else wheel_range
    try:
        picked = list(numbers)
    except TypeError:
        raise InvalidSelection("Roulette numbers must be a list")
    if not 1 <= len(picked) <= settings.roulette_max_selections:
        raise InvalidSelection(f"Select between 1 and {settings.roulette_max_selections} numbers")
    if any(isinstance(n, bool) or not isinstance(n, int) for n in picked):
        raise InvalidSelection("Roulette numbers must be integers")
    if len(set(picked)) != len(picked):
        raise InvalidSelection("Roulette numbers must be unique")
    if any(n < 0 or n > wheel_range for n in picked):
        raise InvalidSelection(f"Roulette numbers must be between 0 and {wheel_range}")
    return sorted(picked)


def roulette_multiplier(count: int, wheel_range: Optional[int] = None) -> Decimal:
    """More numbers covered, lower multiplier: range / count."""
    wheel_range = settings.roulette_range if wheel_range is None else wheel_range
    return quantize(Decimal(wheel_range) / Decimal(count))


# Spin wheel

def segment_for_angle(angle: float, segments: int) -> int:
    """Index of the segment under the pointer for a final wheel angle in degrees."""
    if segments < 1:
        raise InvalidSelection("The wheel needs at least one segment")
    index = int((angle % 360) // (360 / segments))
    # float rounding can land exactly on 360 / segments * segments
    return min(index, segments - 1)


def spin_angle(randomizer: Randomizer, previous_angle: float = 0.0) -> float:
    spins = randomizer.randint(3, 7)
    return previous_angle + spins * 360 + randomizer.random() * 360


def match_pays(multiplier: Optional[Decimal] = None) -> SpinRule:
    """Default wheel rule: the pick pays ``multiplier`` when the wheel stops on it."""
    def rule(pick: str, landed: str) -> Decimal:
        if pick == landed:
            return Decimal(settings.spin_wheel_multiplier if multiplier is None else multiplier)
        return Decimal("0")
    rule.max_multiplier = Decimal(settings.spin_wheel_multiplier if multiplier is None else multiplier)
    return rule


@dataclass
class RoundResult:
    """What a round drew and what it pays"""
    game: CasinoGameCode
    selection: Dict[str, Any]
    result: Dict[str, Any] = field(default_factory=dict)
    multiplier: Decimal = Decimal("0")
    resting_angle: Optional[float] = None

    @property
    def won(self) -> bool:
        return self.multiplier >= 1


class CasinoTable:
    """
    Validates selections and draws outcomes for every casino game.

    The table holds the wheel's last resting angle so consecutive spins start
    where the previous one stopped. ``play`` only draws; the wheel moves when
    the settled round is passed to ``rest``.
    """

    def __init__(
        self,
        randomizer: Randomizer,
        segments: Optional[Sequence[str]] = None,
        spin_rule: Optional[SpinRule] = None,
    ):
        self.randomizer = randomizer
        self.segments = list(segments or settings.spin_wheel_segments)
        self.spin_rule = spin_rule or match_pays()
        self.wheel_angle = 0.0

    def quote(self, game: CasinoGameCode, selection: Dict[str, Any]) -> Decimal:
        """Validate the selection and return the best multiplier it can win."""
        if game == CasinoGameCode.DICE:
            return dice_multiplier(selection.get("target"))
        if game == CasinoGameCode.SLOTS:
            return Decimal(settings.slots_jackpot_multiplier)
        if game == CasinoGameCode.ROULETTE:
            numbers = validate_roulette_numbers(selection.get("numbers", []))
            return roulette_multiplier(len(numbers))
        if game == CasinoGameCode.SPIN_WHEEL:
            if selection.get("pick") not in self.segments:
                raise InvalidSelection(f"Pick one of: {', '.join(self.segments)}")
            return Decimal(getattr(self.spin_rule, "max_multiplier", settings.spin_wheel_multiplier))
        raise InvalidSelection(f"Unknown casino game: {game}")

    def play(self, game: CasinoGameCode, selection: Dict[str, Any]) -> RoundResult:
        self.randomizer.next_round()
        if game == CasinoGameCode.DICE:
            dice = roll_dice(self.randomizer)
            target = selection["target"]
            multiplier = dice_multiplier(target) if sum(dice) >= target else Decimal("0")
            return RoundResult(game, selection, {"dice": dice, "total": sum(dice)}, multiplier)

        if game == CasinoGameCode.SLOTS:
            reels = spin_reels(self.randomizer)
            return RoundResult(game, selection, {"reels": reels}, slots_multiplier(reels))

        if game == CasinoGameCode.ROULETTE:
            numbers = validate_roulette_numbers(selection["numbers"])
            drawn = self.randomizer.randint(0, settings.roulette_range)
            multiplier = roulette_multiplier(len(numbers)) if drawn in numbers else Decimal("0")
            return RoundResult(game, {"numbers": numbers}, {"number": drawn}, multiplier)

        if game == CasinoGameCode.SPIN_WHEEL:
            angle = spin_angle(self.randomizer, self.wheel_angle)
            landed = self.segments[segment_for_angle(angle, len(self.segments))]
            multiplier = Decimal(self.spin_rule(selection["pick"], landed))
            return RoundResult(
                game, selection, {"angle": round(angle, 6), "segment": landed}, multiplier, resting_angle=angle % 360,
            )

        raise InvalidSelection(f"Unknown casino game: {game}")

    def rest(self, outcome: RoundResult) -> None:
        if outcome.resting_angle is not None:
            self.wheel_angle = outcome.resting_angle


def parse_game(game: Any) -> CasinoGameCode:
    try:
        return CasinoGameCode(game)
    except ValueError:
        raise InvalidSelection(f"Unknown casino game: {game}")


async def play_round(
    session: AsyncSession,
    table: CasinoTable,
    user_id: str,
    game: Any,
    amount: Any,
    currency: str,
    selection: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> Tuple[Bet, RoundResult]:
    """
    Play one round: check limits and selection, stake, draw, settle.
    Returns the settled bet and the drawn round; the caller rests the table
    once the round is committed.

    The bet is placed at the best multiplier the selection can win and settled
    at the multiplier the draw actually produced.

    Raises:
        NotFound: unknown or inactive game
        BelowMinimum / AboveMaximum: stake outside the game's limits
        InvalidSelection: selection not valid for the game
    """
    code = parse_game(game)
    selection = dict(selection or {})
    now = now or utcnow()

    casino_game = await get_casino_game(session, code.value)
    stake = validate_amount(amount)
    if stake < casino_game.min_bet:
        raise BelowMinimum(f"Minimum bet for {casino_game.name} is {casino_game.min_bet}")
    if stake > casino_game.max_bet:
        raise AboveMaximum(f"Maximum bet for {casino_game.name} is {casino_game.max_bet}")

    odds = table.quote(code, selection)
    bet = await bet_engine.place_bet(
        session, user_id, GameType.CASINO, code.value, stake, currency, odds,
        details=CasinoDetails(game=code.value, selection=selection), now=now,
    )

    outcome = table.play(code, selection)
    bet.details = CasinoDetails(
        game=code.value,
        selection=outcome.selection,
        result=outcome.result,
        multiplier=outcome.multiplier,
    ).model_dump(mode="json")

    if outcome.won:
        await bet_engine.settle(session, bet, BetOutcome.WON, payout_odds=outcome.multiplier, now=now)
    else:
        await bet_engine.settle(session, bet, BetOutcome.LOST, now=now)

    logger.info(f"Casino {code.value} round for user {user_id}: {outcome.result} x{outcome.multiplier}")
    return bet, outcome
